"""Exceptions raised by the matching engine.

Only programmer and caller errors are exceptions. A search branch that
finds no match is not an error: it simply contributes no solutions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class MatchingError(Exception):
    """Base class for every error raised by this package."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class InvalidConstraint(MatchingError):
    """The expression side of a constraint contains a metavariable."""


@dataclass
class WrongComplexity(MatchingError):
    """An operation was requested on a constraint of the wrong rank."""


@dataclass
class NotApplicable(MatchingError):
    """Substitution attempted with a constraint that is not an instantiation."""


@dataclass
class NotAFunction(MatchingError):
    """A node that is not an expression function was used as one."""


@dataclass
class ArityMismatch(MatchingError):
    """An expression function received the wrong number of arguments."""

    expected: int = 0
    actual: int = 0

    def __str__(self) -> str:
        return f"{self.message} (expected {self.expected}, got {self.actual})"


@dataclass
class EmptyEFA(MatchingError):
    """An expression function application was built with no operands."""


@dataclass
class NonExpressionInExpressionContext(MatchingError):
    """Instantiation would put an environment or declaration inside an expression."""


@dataclass
class SearchAborted(MatchingError):
    """The search exceeded its configured step budget."""

    steps: int = 0

    def __str__(self) -> str:
        return f"{self.message} after {self.steps} steps"


@dataclass
class NotationError(MatchingError):
    """Text could not be read as a tree."""

    position: int = -1

    def __str__(self) -> str:
        if self.position < 0:
            return self.message
        return f"{self.message} at offset {self.position}"
