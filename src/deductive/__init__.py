"""deductive - pattern matching for a symbolic logic engine."""

from deductive.config import MatchingOptions
from deductive.errors import (
    ArityMismatch,
    EmptyEFA,
    InvalidConstraint,
    MatchingError,
    NonExpressionInExpressionContext,
    NotAFunction,
    NotApplicable,
    NotationError,
    SearchAborted,
    WrongComplexity,
)
from deductive.formula import (
    domain,
    from_context,
    instantiate,
)
from deductive.matching import (
    Constraint,
    MatchingChallenge,
    Problem,
    Solution,
    match_all,
)
from deductive.nodes import (
    Application,
    Binding,
    Declaration,
    Environment,
    Node,
    Symbol,
)
from deductive.notation import (
    parse,
    parse_all,
    to_putdown,
)
from deductive.symbols import NewSymbolStream

__all__ = [
    # Tree model
    "Application",
    # Errors
    "ArityMismatch",
    "Binding",
    # Matching
    "Constraint",
    "Declaration",
    "EmptyEFA",
    "Environment",
    "InvalidConstraint",
    "MatchingChallenge",
    "MatchingError",
    # Configuration
    "MatchingOptions",
    "NewSymbolStream",
    "Node",
    "NonExpressionInExpressionContext",
    "NotAFunction",
    "NotApplicable",
    "NotationError",
    "Problem",
    "SearchAborted",
    "Solution",
    "Symbol",
    "WrongComplexity",
    # Formulas
    "domain",
    "from_context",
    "instantiate",
    "match_all",
    # Notation
    "parse",
    "parse_all",
    "to_putdown",
]
