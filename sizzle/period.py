"""Time periods read from configuration, and small execution settings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

_UNITS = (
    (re.compile(r"(\d+)\s*ns"), 1),
    (re.compile(r"(\d+)\s*ms"), 1_000_000),
    (re.compile(r"(\d+)\s*s"), 1_000_000_000),
)
_ZERO = re.compile(r"[^1-9]*")


@dataclass(frozen=True)
class Period:
    """A duration in nanoseconds, read from strings like "25ms", "3s" or "none"."""

    nanos: int = 0

    @classmethod
    def parse(cls, text: str) -> Period:
        for pattern, factor in _UNITS:
            match = pattern.fullmatch(text)
            if match:
                return cls(int(match.group(1)) * factor)
        if _ZERO.fullmatch(text):
            return cls(0)
        raise ValueError(f"Invalid period: {text}")

    @property
    def seconds(self) -> float:
        return self.nanos / 1_000_000_000

    @property
    def duration(self) -> timedelta:
        return timedelta(microseconds=self.nanos // 1000)

    def is_zero(self) -> bool:
        return self.nanos == 0


class OnChangeStrategy(Enum):
    KILL_THEN_RESTART = "kill_then_restart"
    WAIT_THEN_RESTART = "wait_then_restart"


@dataclass(frozen=True)
class Task:
    """Settings for one execution of a job's command."""

    backtrace: str | None = None
    grace_period: Period = Period()


class AutoRefresh(Enum):
    PAUSED = "paused"
    ENABLED = "enabled"

    def is_enabled(self) -> bool:
        return self is AutoRefresh.ENABLED

    def is_paused(self) -> bool:
        return self is AutoRefresh.PAUSED