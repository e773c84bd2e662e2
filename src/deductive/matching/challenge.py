"""Backtracking search for every solution of a matching problem.

The search repeatedly takes the easiest constraint of a problem and acts on
its rank:

    failure        the branch dies
    success        the constraint is dropped
    instantiation  the solution is extended and the binding substituted
    children       the constraint is replaced by its children
    EFA            the branch splits into projection, imitation and
                   constant candidates for the function metavariable

Branches are explored depth first and solutions are produced lazily, so a
caller can stop after the first few.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from deductive.config import MatchingOptions
from deductive.errors import SearchAborted
from deductive.matching.constraint import Complexity, Constraint
from deductive.matching.debruijn import scoped_children, shift
from deductive.matching.expression_functions import (
    apply_ef,
    arity,
    beta_reduce,
    is_ef,
    new_ef,
    new_efa,
)
from deductive.matching.metavariables import (
    is_metavariable,
    metavariable,
    metavariable_names,
)
from deductive.matching.problem import Problem
from deductive.matching.reserved import is_binding_application
from deductive.matching.solution import BINDINGS, DEBRUIJN, Solution
from deductive.nodes import Application, Node, Symbol
from deductive.symbols import NewSymbolStream

logger = logging.getLogger(__name__)

type Candidate = tuple[Node, tuple[Constraint, ...]]


class MatchingChallenge:
    """All ways to instantiate the patterns of a problem to its expressions.

    Args:
        *args: Constraints in any form ``Problem.add`` accepts.
        options: Search options; defaults to ``MatchingOptions()``.

    Example:
        challenge = MatchingChallenge(parse("(@ ?P ?x)"), parse("(f 1)"))
        for solution in challenge.solutions():
            print(solution)

    """

    def __init__(self, *args: Any, options: MatchingOptions | None = None) -> None:
        self.challenge = Problem(*args)
        self.options = options or MatchingOptions()
        self.domain = frozenset(
            name for c in self.challenge for name in metavariable_names(c.pattern)
        )
        self.steps = 0
        self._stream = NewSymbolStream()

    def prepared(self) -> Problem:
        """The challenge with bindings encoded, removed and reduced."""
        return Problem(
            [c.debruijn_encoded().without_bindings().beta_reduced() for c in self.challenge]
        )

    def solutions(self) -> Iterator[Solution]:
        """Lazily yield each solution, restored to ordinary bindings and names."""
        self.steps = 0
        self._stream = NewSymbolStream(
            *(node for c in self.challenge for node in (c.pattern, c.expression))
        )
        start = Solution(domain=self.domain, transforms=(DEBRUIJN, BINDINGS))
        emitted: list[Solution] = []
        for solution in self._search(self.prepared(), start):
            restored = solution.restored()
            if restored is None:
                logger.debug("Discarding unrestorable solution %s", solution)
                continue
            if self.options.deduplicate and restored in emitted:
                continue
            emitted.append(restored)
            logger.debug("Solution %d: %s", len(emitted), restored)
            yield restored

    def get_solutions(self) -> list[Solution]:
        return list(self.solutions())

    def first(self) -> Solution | None:
        return next(self.solutions(), None)

    def _step(self, problem: Problem) -> None:
        self.steps += 1
        limit = self.options.max_steps
        if limit is not None and self.steps > limit:
            logger.warning("Matching search aborted after %d steps", limit)
            msg = "Matching search exceeded its step budget"
            raise SearchAborted(msg, steps=limit)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Step %d: %s", self.steps, problem)

    def _search(self, problem: Problem, solution: Solution) -> Iterator[Solution]:
        self._step(problem)
        if problem.empty():
            yield solution
            return
        constraint = problem.first()
        rest = problem.without(0)
        match constraint.complexity:
            case Complexity.FAILURE:
                return
            case Complexity.SUCCESS:
                yield from self._search(rest, solution)
            case Complexity.INSTANTIATION:
                yield from self._instantiate(
                    rest, solution, constraint.name, constraint.expression
                )
            case Complexity.CHILDREN:
                yield from self._search(rest.plus(constraint.children()), solution)
            case Complexity.EFA:
                yield from self._solve_efa(constraint, rest, solution)

    def _instantiate(
        self,
        problem: Problem,
        solution: Solution,
        name: str,
        value: Node,
        extras: Sequence[Constraint] = (),
    ) -> Iterator[Solution]:
        extended = solution.extended(name, value)
        if extended is None:
            return
        binding = {name: value}
        remaining = Problem([c.after_substituting(binding) for c in (*problem, *extras)])
        yield from self._search(remaining, extended)

    def _solve_efa(
        self,
        constraint: Constraint,
        rest: Problem,
        solution: Solution,
    ) -> Iterator[Solution]:
        pattern = constraint.pattern
        assert isinstance(pattern, Application)
        _, operator, *operands = pattern.children
        target = constraint.expression
        if is_ef(operator):
            if arity(operator) != len(operands):
                return
            reduced = beta_reduce(apply_ef(operator, *operands))
            yield from self._search(rest.plus(Constraint(reduced, target)), solution)
            return
        if not is_metavariable(operator):
            if (
                isinstance(target, Application)
                and len(target.children) == len(pattern.children)
            ):
                pairs = zip(pattern.children, target.children, strict=True)
                yield from self._search(
                    rest.plus([Constraint(p, e) for p, e in pairs]), solution
                )
            return
        assert isinstance(operator, Symbol)
        parameters = self._stream.next_n(len(operands))
        for value, extras in self._candidates(parameters, operands, target):
            yield from self._instantiate(rest, solution, operator.text, value, extras)

    def _candidates(
        self,
        parameters: list[Symbol],
        operands: list[Node],
        target: Node,
    ) -> Iterator[Candidate]:
        for parameter, operand in zip(parameters, operands, strict=True):
            yield new_ef(*parameters, parameter), (Constraint(operand, target),)
        if isinstance(target, Application):
            yield self._imitation(parameters, operands, target)
        yield new_ef(*parameters, target), ()

    def _imitation(
        self,
        parameters: list[Symbol],
        operands: list[Node],
        target: Application,
    ) -> Candidate:
        """Mirror ``target`` with one helper function per child.

        The function becomes ``λv̄.(target with child i -> (@ Hi v̄))`` and
        each helper must map the operands to the child it replaced. Operands
        moved under a binder have their indices shifted to match.
        """
        binder = is_binding_application(target)
        body: list[Node] = []
        extras: list[Constraint] = []
        for position, (child, increment) in enumerate(scoped_children(target)):
            if binder and position == 0:
                body.append(child)
                continue
            helper = metavariable(self._stream.next().text)
            body.append(new_efa(helper, *parameters))
            shifted = [shift(operand, increment) for operand in operands]
            extras.append(Constraint(new_efa(helper, *shifted), child))
        return new_ef(*parameters, target.rebuild(body)), tuple(extras)

    def __str__(self) -> str:
        return str(self.challenge)


def match_all(*args: Any, options: MatchingOptions | None = None) -> list[Solution]:
    """Every solution of the matching problem built from ``args``."""
    return MatchingChallenge(*args, options=options).get_solutions()
