import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from config import Config

_WHITESPACE = re.compile(r"\s+")


def normalize_service_key(service: str) -> str:
    """'Haircut and Beard' -> 'haircut-and-beard'"""
    return _WHITESPACE.sub("-", (service or "").strip().lower())


@dataclass(frozen=True)
class SchedulingSettings:
    """Read-only scheduling knobs handed to the calculator, resolver, token generator and queue."""

    buffer_minutes: int = 10
    pending_time_limit_minutes: int = 120
    sweep_interval_minutes: int = 15
    token_prefixes: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({"appointment": "APPT", "walkin": "WALKIN"})
    )
    token_delimiter: str = "-"
    token_max_attempts: int = 5
    service_durations: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    default_service_duration: int = 30
    roster_entry_limit: int = 7
    block_unconfirmed_requests: bool = False

    @classmethod
    def from_config(cls, config=None) -> "SchedulingSettings":
        """Build from a Flask config mapping (or the Config class defaults)."""
        if config is None:
            config = {k: getattr(Config, k) for k in dir(Config) if k.isupper()}

        return cls(
            buffer_minutes=int(config.get("BUFFER_MINUTES", 10)),
            pending_time_limit_minutes=int(config.get("PENDING_TIME_LIMIT_MINUTES", 120)),
            sweep_interval_minutes=int(config.get("SWEEP_INTERVAL_MINUTES", 15)),
            token_prefixes=MappingProxyType(dict(config.get("TOKEN_PREFIXES") or {"appointment": "APPT", "walkin": "WALKIN"})),
            token_delimiter=config.get("TOKEN_DELIMITER", "-"),
            token_max_attempts=int(config.get("TOKEN_MAX_ATTEMPTS", 5)),
            service_durations=MappingProxyType(dict(config.get("SERVICE_DURATIONS") or {})),
            default_service_duration=int(config.get("DEFAULT_SERVICE_DURATION", 30)),
            roster_entry_limit=int(config.get("ROSTER_ENTRY_LIMIT", 7)),
            block_unconfirmed_requests=bool(config.get("BLOCK_UNCONFIRMED_REQUESTS", False)),
        )

    def duration_for(self, service: str) -> int:
        """Service duration in minutes; unknown services get the default."""
        return self.service_durations.get(normalize_service_key(service), self.default_service_duration)


def current_settings() -> SchedulingSettings:
    """Settings for the active Flask app, built once and cached on app.extensions."""
    from flask import current_app

    settings = current_app.extensions.get("scheduling_settings")
    if settings is None:
        settings = SchedulingSettings.from_config(current_app.config)
        current_app.extensions["scheduling_settings"] = settings
    return settings
