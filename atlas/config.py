"""Engine configuration resolved once per application."""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigurationError
from .plans import DEFAULT_PLANS

DEFAULT_TIMEZONE = "America/Sao_Paulo"
DEFAULT_GRACE_DAYS = 3
DEFAULT_TOKEN_MAX_AGE = 86400  # 24 hours
DEFAULT_CORS_ALLOW_HEADERS = ("authorization", "x-client-info", "apikey", "content-type")


def _parse_int(value: object, name: str) -> int:
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < 0:
        raise ConfigurationError(f"{name} must not be negative")
    return parsed


def _parse_plans(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        plans = tuple(p.strip().lower() for p in value.split(",") if p.strip())
    else:
        plans = tuple(str(p).strip().lower() for p in value)  # type: ignore[union-attr]
    if not plans:
        raise ConfigurationError("SUBSCRIPTION_PLANS must name at least one plan")
    return plans


@dataclass(frozen=True)
class EngineConfig:
    """Settings shared by the sweeper and the access evaluator.

    ``supported_plans`` is ordered from the lowest to the highest tier.
    """

    business_timezone: str = DEFAULT_TIMEZONE
    grace_period_days: int = DEFAULT_GRACE_DAYS
    supported_plans: tuple[str, ...] = DEFAULT_PLANS
    token_max_age: int = DEFAULT_TOKEN_MAX_AGE
    cors_allow_headers: tuple[str, ...] = field(default=DEFAULT_CORS_ALLOW_HEADERS)

    def __post_init__(self) -> None:
        try:
            ZoneInfo(self.business_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown timezone: {self.business_timezone}") from exc

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.business_timezone)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "EngineConfig":
        """Build the config from a Flask config (or any mapping).

        Missing keys fall back to environment variables, then to defaults.
        """

        def lookup(key: str, default: object) -> object:
            if key in mapping and mapping[key] is not None:
                return mapping[key]
            return os.environ.get(key, default)

        return cls(
            business_timezone=str(lookup("BUSINESS_TIMEZONE", DEFAULT_TIMEZONE)),
            grace_period_days=_parse_int(
                lookup("SUBSCRIPTION_GRACE_DAYS", DEFAULT_GRACE_DAYS), "SUBSCRIPTION_GRACE_DAYS"
            ),
            supported_plans=_parse_plans(lookup("SUBSCRIPTION_PLANS", DEFAULT_PLANS)),
            token_max_age=_parse_int(
                lookup("AUTH_TOKEN_MAX_AGE", DEFAULT_TOKEN_MAX_AGE), "AUTH_TOKEN_MAX_AGE"
            ),
        )
