"""Matching core: constraints, expression functions and the search.

Example usage:
    from deductive.matching import match_all
    from deductive.notation import parse

    for solution in match_all(parse("(@ ?P ?x)"), parse("(f 1)")):
        print(solution)
"""

from __future__ import annotations

from deductive.matching.challenge import MatchingChallenge, match_all
from deductive.matching.constraint import (
    Complexity,
    Constraint,
    remove_bindings,
    restore_bindings,
    substitute,
)
from deductive.matching.debruijn import (
    BoundIndex,
    BoundSlot,
    alpha_equivalent,
    decode,
    encode,
    has_free_indices,
    shift,
)
from deductive.matching.expression_functions import (
    apply_ef,
    arity,
    beta_reduce,
    is_ef,
    is_efa,
    new_ef,
    new_efa,
)
from deductive.matching.metavariables import (
    contains_metavariable,
    is_metavariable,
    metavariable,
    metavariable_names,
)
from deductive.matching.problem import Problem
from deductive.matching.reserved import APPLICATION_HEAD, BINDING_HEAD, FUNCTION_HEAD
from deductive.matching.solution import Solution

__all__ = [
    "APPLICATION_HEAD",
    "BINDING_HEAD",
    "FUNCTION_HEAD",
    "BoundIndex",
    "BoundSlot",
    "Complexity",
    "Constraint",
    "MatchingChallenge",
    "Problem",
    "Solution",
    "alpha_equivalent",
    "apply_ef",
    "arity",
    "beta_reduce",
    "contains_metavariable",
    "decode",
    "encode",
    "has_free_indices",
    "is_ef",
    "is_efa",
    "is_metavariable",
    "match_all",
    "metavariable",
    "metavariable_names",
    "new_ef",
    "new_efa",
    "remove_bindings",
    "restore_bindings",
    "shift",
    "substitute",
]
