"""Options controlling a matching run."""

from __future__ import annotations

import os
from dataclasses import dataclass

MAX_STEPS_VARIABLE = "DEDUCTIVE_MAX_STEPS"


@dataclass(frozen=True)
class MatchingOptions:
    """Knobs for one matching search.

    Attributes:
        max_steps: Upper bound on search steps; ``None`` means unbounded.
            Exceeding the bound raises ``SearchAborted``.
        deduplicate: Drop solutions alpha-equivalent to one already emitted.

    """

    max_steps: int | None = None
    deduplicate: bool = True

    def __post_init__(self) -> None:
        if self.max_steps is not None and self.max_steps < 0:
            msg = f"max_steps must be non-negative, got {self.max_steps}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls) -> MatchingOptions:
        """Build options from ``DEDUCTIVE_MAX_STEPS`` if it is set."""
        raw = os.environ.get(MAX_STEPS_VARIABLE, "").strip()
        if not raw:
            return cls()
        try:
            return cls(max_steps=int(raw))
        except ValueError as e:
            msg = f"{MAX_STEPS_VARIABLE} must be a non-negative integer, got {raw!r}"
            raise ValueError(msg) from e
