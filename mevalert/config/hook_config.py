"""
Hook deployment configuration for the MEV alert network.

Values are read from the environment when the config object is created,
so ``reload_config()`` picks up changes to ``os.environ``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from eth_utils import is_address

from mevalert.core.fee_override import DEFAULT_CHAIN_ID
from mevalert.core.types import ETHER, MAX_FEE_BPS, HookParameters

from .base import BaseConfig, ConfigError

logger = logging.getLogger(__name__)

# First account of the local development node
DEFAULT_OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def _env_int(key: str, default: int):
    return field(default_factory=lambda: BaseConfig.get_env_int(key, default))


def _env_str(key: str, default: Optional[str] = None):
    return field(default_factory=lambda: BaseConfig.get_env(key, default))


@dataclass
class HookConfig(BaseConfig):
    """Tunable hook parameters and the accounts the hook pays out to."""

    # Scoring
    LARGE_SWAP_THRESHOLD: int = _env_int("LARGE_SWAP_THRESHOLD", ETHER)
    RAPID_SWAP_WINDOW: int = _env_int("RAPID_SWAP_WINDOW", 300)
    VOLUME_SPIKE_MULTIPLIER: int = _env_int("VOLUME_SPIKE_MULTIPLIER", 10)
    CONSECUTIVE_SWAP_BONUS_PCT: int = _env_int("CONSECUTIVE_SWAP_BONUS_PCT", 200)
    DEFAULT_ALERT_THRESHOLD: int = _env_int("DEFAULT_ALERT_THRESHOLD", 5 * ETHER)

    # Auctions
    AUCTION_OWNER_ONLY: bool = field(
        default_factory=lambda: BaseConfig.get_env_bool("AUCTION_OWNER_ONLY", False)
    )
    DEFAULT_FEE_BPS: int = _env_int("DEFAULT_FEE_BPS", 100)
    FEE_OVERRIDE_DURATION: int = _env_int("FEE_OVERRIDE_DURATION", 300)
    MAX_TIME_BONUS_PCT: int = _env_int("MAX_TIME_BONUS_PCT", 20)

    # Insurance
    MAX_COMPENSATION_PCT: int = _env_int("MAX_COMPENSATION_PCT", 50)
    MIN_INSURABLE_LOSS: int = _env_int("MIN_INSURABLE_LOSS", ETHER // 100)

    # Accounts
    HOOK_OWNER: str = _env_str("HOOK_OWNER", DEFAULT_OWNER)
    HOOK_ADDRESS: str = _env_str("HOOK_ADDRESS", "mev-alert-hook")
    TREASURY_ADDRESS: Optional[str] = _env_str("TREASURY_ADDRESS")
    PROTOCOL_ADDRESS: Optional[str] = _env_str("PROTOCOL_ADDRESS")
    VENUE_ADDRESS: Optional[str] = _env_str("VENUE_ADDRESS")
    ORACLE_SIGNERS: List[str] = field(default_factory=lambda: BaseConfig.get_env_list("ORACLE_SIGNERS"))
    CHAIN_ID: int = _env_int("CHAIN_ID", DEFAULT_CHAIN_ID)

    def _validate_config(self):
        """Validate hook parameters and configured addresses."""
        super()._validate_config()

        if self.LARGE_SWAP_THRESHOLD <= 0:
            raise ConfigError(f"LARGE_SWAP_THRESHOLD must be positive, got {self.LARGE_SWAP_THRESHOLD}")
        if self.RAPID_SWAP_WINDOW < 0:
            raise ConfigError(f"RAPID_SWAP_WINDOW cannot be negative, got {self.RAPID_SWAP_WINDOW}")
        if self.VOLUME_SPIKE_MULTIPLIER <= 0:
            raise ConfigError("VOLUME_SPIKE_MULTIPLIER must be positive")
        if self.CONSECUTIVE_SWAP_BONUS_PCT < 100:
            raise ConfigError("CONSECUTIVE_SWAP_BONUS_PCT must be at least 100")
        if self.DEFAULT_ALERT_THRESHOLD < 0:
            raise ConfigError("DEFAULT_ALERT_THRESHOLD cannot be negative")
        if not 0 <= self.DEFAULT_FEE_BPS <= MAX_FEE_BPS:
            raise ConfigError(f"DEFAULT_FEE_BPS must be within 0..{MAX_FEE_BPS}, got {self.DEFAULT_FEE_BPS}")
        if self.FEE_OVERRIDE_DURATION <= 0:
            raise ConfigError("FEE_OVERRIDE_DURATION must be positive")
        if not 0 <= self.MAX_TIME_BONUS_PCT <= 100:
            raise ConfigError("MAX_TIME_BONUS_PCT must be within 0..100")
        if not 0 < self.MAX_COMPENSATION_PCT <= 100:
            raise ConfigError("MAX_COMPENSATION_PCT must be within 1..100")
        if self.MIN_INSURABLE_LOSS < 0:
            raise ConfigError("MIN_INSURABLE_LOSS cannot be negative")

        if not self.HOOK_OWNER:
            raise ConfigError("HOOK_OWNER is required")
        for signer in self.ORACLE_SIGNERS:
            if not is_address(signer):
                raise ConfigError(f"Oracle signer {signer} is not an address")

    def hook_parameters(self) -> HookParameters:
        """Build the initial hook parameters from this config."""
        return HookParameters(
            large_swap_threshold=self.LARGE_SWAP_THRESHOLD,
            rapid_swap_window=self.RAPID_SWAP_WINDOW,
            volume_spike_multiplier=self.VOLUME_SPIKE_MULTIPLIER,
            consecutive_swap_bonus_pct=self.CONSECUTIVE_SWAP_BONUS_PCT,
            auction_owner_only=self.AUCTION_OWNER_ONLY,
            default_fee_bps=self.DEFAULT_FEE_BPS,
            fee_override_duration=self.FEE_OVERRIDE_DURATION,
            max_time_bonus_pct=self.MAX_TIME_BONUS_PCT,
            max_compensation_pct=self.MAX_COMPENSATION_PCT,
            min_insurable_loss=self.MIN_INSURABLE_LOSS,
        )

    @property
    def deployment_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for constructing a ``MevAlertHook``."""
        return {
            "owner": self.HOOK_OWNER,
            "address": self.HOOK_ADDRESS,
            "params": self.hook_parameters(),
            "treasury": self.TREASURY_ADDRESS or None,
            "protocol": self.PROTOCOL_ADDRESS or None,
            "venue": self.VENUE_ADDRESS or None,
            "chain_id": self.CHAIN_ID,
        }
