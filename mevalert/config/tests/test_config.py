"""
Test suite for the centralized configuration system.

Tests configuration loading, validation, and the hook parameters built
from the environment.
"""
import pytest

from mevalert.config import ConfigError, ConfigManager, HookConfig, NatsConfig, get_config, reload_config
from mevalert.core.events import HookEvent
from mevalert.core.types import ETHER, HookParameters

HOOK_ENV_VARS = [
    "LARGE_SWAP_THRESHOLD",
    "DEFAULT_FEE_BPS",
    "MAX_COMPENSATION_PCT",
    "AUCTION_OWNER_ONLY",
    "ORACLE_SIGNERS",
    "TREASURY_ADDRESS",
    "VENUE_ADDRESS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in HOOK_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


class TestHookConfig:
    """Test suite for hook configuration."""

    def test_defaults_match_hook_parameters(self):
        """Test the default config builds the default parameters."""
        config = HookConfig()
        assert config.hook_parameters() == HookParameters()
        assert config.DEFAULT_ALERT_THRESHOLD == 5 * ETHER

    def test_environment_overrides(self, monkeypatch):
        """Test values are read from the environment at creation."""
        monkeypatch.setenv("DEFAULT_FEE_BPS", "250")
        monkeypatch.setenv("AUCTION_OWNER_ONLY", "true")
        monkeypatch.setenv("LARGE_SWAP_THRESHOLD", str(2 * ETHER))

        params = HookConfig().hook_parameters()
        assert params.default_fee_bps == 250
        assert params.auction_owner_only is True
        assert params.large_swap_threshold == 2 * ETHER

    def test_non_integer_value(self, monkeypatch):
        """Test malformed integers raise a config error."""
        monkeypatch.setenv("DEFAULT_FEE_BPS", "lots")
        with pytest.raises(ConfigError, match="must be an integer"):
            HookConfig()

    @pytest.mark.parametrize("overrides", [
        {"DEFAULT_FEE_BPS": 10_001},
        {"MAX_COMPENSATION_PCT": 0},
        {"MAX_TIME_BONUS_PCT": 101},
        {"LARGE_SWAP_THRESHOLD": 0},
        {"CONSECUTIVE_SWAP_BONUS_PCT": 50},
        {"FEE_OVERRIDE_DURATION": 0},
        {"ORACLE_SIGNERS": ["not-an-address"]},
    ])
    def test_validation(self, overrides):
        """Test out-of-range values are rejected."""
        with pytest.raises(ConfigError):
            HookConfig(**overrides)

    def test_invalid_log_level(self):
        """Test an unknown log level is rejected."""
        with pytest.raises(ConfigError, match="Invalid log level"):
            HookConfig(LOG_LEVEL="LOUD")

    def test_invalid_environment(self):
        """Test an unknown environment is rejected."""
        with pytest.raises(ConfigError, match="Invalid environment"):
            HookConfig(ENVIRONMENT="moon")

    def test_oracle_signers_list(self, monkeypatch):
        """Test signers are read as a comma separated list."""
        monkeypatch.setenv(
            "ORACLE_SIGNERS",
            "0x70997970C51812dc3A010C7d01b50e0d17dc79C8, 0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
        )
        assert len(HookConfig().ORACLE_SIGNERS) == 2

    def test_deployment_kwargs(self, monkeypatch):
        """Test unset optional addresses become None."""
        monkeypatch.setenv("TREASURY_ADDRESS", "0x70997970C51812dc3A010C7d01b50e0d17dc79C8")
        kwargs = HookConfig().deployment_kwargs

        assert kwargs["treasury"] == "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
        assert kwargs["venue"] is None
        assert isinstance(kwargs["params"], HookParameters)


class TestNatsConfig:
    """Test suite for NATS configuration."""

    @pytest.fixture
    def nats_config(self):
        return NatsConfig()

    def test_urls(self, nats_config):
        """Test each environment resolves to a NATS URL."""
        for env in ("local", "dev", "staging", "production", "test"):
            assert nats_config.get_nats_url(env).startswith("nats://")

    def test_every_event_has_a_subject(self, nats_config):
        """Test the configured subjects cover every hook event type."""
        event_types = {cls for cls in _all_subclasses(HookEvent)}
        subjects = set(nats_config.event_subjects)
        for cls in event_types:
            assert f"mevalert.{cls.category}.{cls.event_type}" in subjects

    def test_stream_subjects(self, nats_config):
        """Test the stream captures every category with a wildcard."""
        assert "mevalert.alerts.*" in nats_config.stream_subjects
        assert "mevalert.auctions.*" in nats_config.stream_subjects
        assert nats_config.jetstream_config["subjects"] == nats_config.stream_subjects

    def test_event_type_from_subject(self, nats_config):
        """Test subjects parse back into event types."""
        assert nats_config.get_event_type_from_subject("mevalert.alerts.mev_alert") == "mev_alert"
        assert nats_config.get_event_type_from_subject("pools.uniswap.v3") is None


class TestConfigManager:
    """Test suite for the configuration manager."""

    def test_environment_override(self):
        """Test the manager applies an explicit environment."""
        manager = ConfigManager(environment="test")
        assert manager.environment == "test"
        assert manager.hook.ENVIRONMENT == "test"
        assert manager.validate_configuration() is True

    def test_invalid_config_wrapped(self, monkeypatch):
        """Test initialization failures surface as config errors."""
        monkeypatch.setenv("DEFAULT_FEE_BPS", "99999")
        with pytest.raises(ConfigError, match="Configuration initialization failed"):
            ConfigManager()

    def test_publishing_config(self):
        """Test the relay publishing settings are assembled."""
        config = ConfigManager().get_nats_publishing_config()
        assert config["url"].startswith("nats://")
        assert config["subjects"]

    def test_to_dict(self):
        """Test every section is present."""
        data = ConfigManager().to_dict()
        assert set(data) == {"environment", "base", "hook", "nats"}

    def test_singleton(self):
        """Test get_config caches and reload_config replaces."""
        first = get_config()
        assert get_config() is first
        assert reload_config() is not first


def _all_subclasses(cls):
    for sub in cls.__subclasses__():
        yield sub
        yield from _all_subclasses(sub)
