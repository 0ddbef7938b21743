from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv


T = TypeVar("T")


@dataclass(frozen=True)
class Settings:
    confidence_level: float = 0.95
    statistical_power: float = 0.80
    bayes_samples: int = 10_000
    max_test_days: int = 14
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not (0 < self.confidence_level < 1):
            raise ValueError("ABSTATS_CONFIDENCE_LEVEL must be in (0, 1)")
        if not (0 < self.statistical_power < 1):
            raise ValueError("ABSTATS_STATISTICAL_POWER must be in (0, 1)")
        if self.bayes_samples <= 0:
            raise ValueError("ABSTATS_BAYES_SAMPLES must be > 0")
        if self.max_test_days <= 0:
            raise ValueError("ABSTATS_MAX_TEST_DAYS must be > 0")


def _read(env: Mapping[str, str], name: str, cast: Callable[[str], T], default: T) -> T:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} has an invalid value: {raw!r}") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from the environment (a .env file is honoured)."""
    if env is None:
        load_dotenv()
        env = os.environ

    return Settings(
        confidence_level=_read(env, "ABSTATS_CONFIDENCE_LEVEL", float, 0.95),
        statistical_power=_read(env, "ABSTATS_STATISTICAL_POWER", float, 0.80),
        bayes_samples=_read(env, "ABSTATS_BAYES_SAMPLES", int, 10_000),
        max_test_days=_read(env, "ABSTATS_MAX_TEST_DAYS", int, 14),
        log_level=_read(env, "ABSTATS_LOG_LEVEL", str, "INFO").upper(),
    )
