"""
NATS configuration for the MEV alert relay.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .base import BaseConfig

SUBJECT_PREFIX = "mevalert"

EVENT_CATEGORIES = {
    "alerts": ["mev_alert"],
    "auctions": ["auction_started", "bid_placed", "time_weighted_bid", "auction_settled"],
    "fees": ["fee_override_set"],
    "insurance": [
        "insurance_deposit",
        "insurance_top_up",
        "insurance_claimed",
        "insurance_emergency_withdrawal",
    ],
    "emergency": ["emergency_paused", "emergency_unpaused"],
    "swaps": ["swap_observed"],
    "admin": ["fees_withdrawn"],
}


@dataclass
class NatsConfig(BaseConfig):
    """NATS messaging configuration."""

    # NATS Connection Settings
    NATS_ENABLED: bool = BaseConfig.get_env_bool("NATS_ENABLED", True)
    NATS_URL_LOCAL: str = BaseConfig.get_env("NATS_URL_LOCAL", "nats://localhost:4222")
    NATS_URL_DEV: str = BaseConfig.get_env("NATS_URL_DEV", "nats://nats:4222")
    NATS_URL_PRODUCTION: str = BaseConfig.get_env(
        "NATS_URL_PRODUCTION", "nats://nats-server:4222"
    )

    # Connection Parameters
    NATS_TIMEOUT: int = BaseConfig.get_env_int("NATS_TIMEOUT", 30)
    NATS_MAX_RECONNECT_ATTEMPTS: int = BaseConfig.get_env_int(
        "NATS_MAX_RECONNECT_ATTEMPTS", 60
    )
    NATS_RECONNECT_TIME_WAIT: int = BaseConfig.get_env_int(
        "NATS_RECONNECT_TIME_WAIT", 2
    )

    # JetStream Configuration
    JETSTREAM_ENABLED: bool = BaseConfig.get_env_bool("JETSTREAM_ENABLED", True)
    STREAM_NAME: str = BaseConfig.get_env("STREAM_NAME", "MEV_ALERTS")

    @property
    def nats_urls(self) -> Dict[str, str]:
        """Get NATS URLs for different environments."""
        return {
            "local": self.NATS_URL_LOCAL,
            "test": self.NATS_URL_LOCAL,
            "dev": self.NATS_URL_DEV,
            "staging": self.NATS_URL_DEV,  # Use dev for staging
            "production": self.NATS_URL_PRODUCTION,
        }

    def get_nats_url(self, environment: str = None) -> str:
        """Get NATS URL for the current or specified environment."""
        env = environment or self.ENVIRONMENT
        return self.nats_urls.get(env, self.NATS_URL_LOCAL)

    @property
    def event_subjects(self) -> List[str]:
        """Get every subject the hook publishes on."""
        return [
            self.get_event_subject(category, event_type)
            for category, event_types in EVENT_CATEGORIES.items()
            for event_type in event_types
        ]

    @property
    def stream_subjects(self) -> List[str]:
        """Wildcard subjects captured by the JetStream stream."""
        return [f"{SUBJECT_PREFIX}.{category}.*" for category in EVENT_CATEGORIES]

    def get_event_subject(self, category: str, event_type: str) -> str:
        """Get the subject for one event type."""
        return f"{SUBJECT_PREFIX}.{category.lower()}.{event_type.lower()}"

    def get_event_type_from_subject(self, subject: str) -> Optional[str]:
        """Extract the event type from a subject."""
        parts = subject.split(".")
        if len(parts) != 3 or parts[0] != SUBJECT_PREFIX:
            return None
        return parts[-1]

    @property
    def connection_params(self) -> Dict:
        """Get NATS connection parameters."""
        return {
            "servers": [self.get_nats_url()],
            "max_reconnect_attempts": self.NATS_MAX_RECONNECT_ATTEMPTS,
            "reconnect_time_wait": self.NATS_RECONNECT_TIME_WAIT,
            "allow_reconnect": True,
            "ping_interval": 120,
            "max_outstanding_pings": 2,
        }

    @property
    def client_options(self) -> Dict:
        """Connection parameters passed to the client alongside its server URL."""
        options = dict(self.connection_params)
        options.pop("servers")
        return options

    @property
    def jetstream_config(self) -> Dict:
        """Get JetStream configuration."""
        return {
            "stream_name": self.STREAM_NAME,
            "subjects": self.stream_subjects,
            "storage": "file",
            "retention": "limits",
            "max_age": 24 * 60 * 60,  # 24 hours in seconds
            "max_msgs": 1000000,
            "replicas": 1,
            "no_ack": False,
        }
