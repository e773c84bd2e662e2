"""Tests for constraints, their complexity and substitution."""

import pytest

from deductive.errors import InvalidConstraint, NotApplicable, WrongComplexity
from deductive.matching.constraint import (
    Complexity,
    Constraint,
    can_restore_bindings,
    remove_bindings,
    restore_bindings,
    substitute,
)
from deductive.matching.expression_functions import is_ef
from deductive.matching.reserved import BINDING_HEAD
from deductive.nodes import Application, Symbol
from deductive.notation import parse


def con(pattern: str, expression: str) -> Constraint:
    """Create a constraint from notation."""
    return Constraint(parse(pattern), parse(expression))


class TestConstruction:
    """Tests for building constraints."""

    def test_expression_without_metavariables(self) -> None:
        """Patterns may have metavariables."""
        constraint = con("(f ?x)", "(f a)")
        assert constraint.pattern == parse("(f ?x)")
        assert constraint.expression == parse("(f a)")

    def test_expression_with_metavariable_rejected(self) -> None:
        """The expression side may not contain metavariables."""
        with pytest.raises(InvalidConstraint, match="has a metavariable"):
            con("?x", "(f ?y)")

    def test_value_equality(self) -> None:
        """Constraints with equal sides are equal."""
        assert con("?x", "a") == con("?x", "a")
        assert con("?x", "a") != con("?x", "b")

    def test_str(self) -> None:
        """Constraints print as a pair."""
        assert str(con("?x", "(f a)")) == "(?x,(f a))"


class TestComplexity:
    """Tests for complexity ranks."""

    @pytest.mark.parametrize(
        ("pattern", "expression", "expected"),
        [
            ("x", "y", Complexity.FAILURE),
            ("x", "x", Complexity.SUCCESS),
            ("(f (g a))", "(f (g a))", Complexity.SUCCESS),
            ("?x", "(f y)", Complexity.INSTANTIATION),
            ("(f ?x)", "(f y)", Complexity.CHILDREN),
            ("(f ?x)", "(g y z)", Complexity.FAILURE),
            ("(f ?x)", "y", Complexity.FAILURE),
            ("(f ?x)", "(∀ y , y)", Complexity.FAILURE),
            ("(∀ ?x , ?B)", "(∀ y , y)", Complexity.CHILDREN),
            ("(∀ ?x , ?B)", "(∃ y z , y)", Complexity.FAILURE),
            ("{ ?x }", "{ a }", Complexity.CHILDREN),
            (":{ ?x }", "{ a }", Complexity.FAILURE),
            ("[?x]", "[a]", Complexity.CHILDREN),
            ("(@ ?P x)", "(f 1)", Complexity.EFA),
            ("(@ ?P ?x)", "y", Complexity.EFA),
        ],
    )
    def test_rank(self, pattern: str, expression: str, expected: Complexity) -> None:
        """Each kind of pair gets its rank."""
        assert con(pattern, expression).complexity is expected

    def test_names(self) -> None:
        """Ranks have readable names."""
        assert con("x", "y").complexity_name() == "failure"
        assert con("x", "x").complexity_name() == "success"
        assert con("?x", "y").complexity_name() == "instantiation"
        assert con("(f ?x)", "(f y)").complexity_name() == "children"
        assert con("(@ ?P x)", "y").complexity_name() == "EFA"

    def test_ranks_are_ordered(self) -> None:
        """Failure ranks lowest and EFA highest."""
        assert sorted(Complexity, reverse=True)[0] is Complexity.EFA
        assert min(Complexity) is Complexity.FAILURE


class TestChildren:
    """Tests for decomposing constraints."""

    def test_pairs_children(self) -> None:
        """Children are paired position by position."""
        assert con("(f ?x ?y)", "(f a b)").children() == [
            con("f", "f"),
            con("?x", "a"),
            con("?y", "b"),
        ]

    def test_binding_children(self) -> None:
        """Bindings pair head, parameters and body."""
        assert con("(∀ ?x , (P ?x))", "(∀ y , (P y))").children() == [
            con("∀", "∀"),
            con("?x", "y"),
            con("(P ?x)", "(P y)"),
        ]

    def test_wrong_rank(self) -> None:
        """Only children-rank constraints decompose."""
        with pytest.raises(WrongComplexity, match="of type instantiation"):
            con("?x", "a").children()
        with pytest.raises(WrongComplexity, match="of type EFA"):
            con("(@ ?P x)", "a").children()


class TestInstantiation:
    """Tests for instantiations and substitution."""

    def test_is_instantiation(self) -> None:
        """Only a bare metavariable pattern is an instantiation."""
        assert con("?x", "a").is_instantiation()
        assert con("?x", "a").can_apply()
        assert not con("(f ?x)", "(f a)").is_instantiation()

    def test_name(self) -> None:
        """An instantiation names its metavariable."""
        assert con("?x", "a").name == "x"

    def test_name_of_non_instantiation(self) -> None:
        """Other constraints have no metavariable name."""
        with pytest.raises(NotApplicable, match="Not an instantiation"):
            _ = con("(f ?x)", "(f a)").name

    def test_applied_to_node(self) -> None:
        """Every occurrence of the metavariable is replaced."""
        result = con("?x", "(g a)").applied_to(parse("(f ?x (h ?x) ?y)"))
        assert result == parse("(f (g a) (h (g a)) ?y)")

    def test_applied_to_does_not_touch_plain_symbols(self) -> None:
        """A plain symbol with the metavariable's text is not replaced."""
        assert con("?x", "a").applied_to(parse("(f x ?x)")) == parse("(f x a)")

    def test_applied_to_constraint(self) -> None:
        """Applying to a constraint substitutes in its pattern."""
        result = con("?x", "a").applied_to(con("(f ?x)", "(f a)"))
        assert result == con("(f a)", "(f a)")

    def test_applied_to_reduces(self) -> None:
        """Substituting a function makes applications reducible."""
        result = con("?P", "(λ v , (g v))").applied_to(parse("(@ ?P 1)"))
        assert result == parse("(g 1)")

    def test_non_instantiation_cannot_apply(self) -> None:
        """Only instantiations can be applied."""
        with pytest.raises(NotApplicable):
            con("(f ?x)", "(f a)").applied_to(parse("?x"))

    def test_apply_to_sequence(self) -> None:
        """A list of targets is updated in place."""
        targets = [parse("?x"), parse("(f ?x)"), parse("b")]
        con("?x", "a").apply_to(targets)
        assert targets == [parse("a"), parse("(f a)"), parse("b")]

    def test_after_substituting_in_order(self) -> None:
        """Substitutions are applied one after another."""
        original = con("(f ?x ?y)", "(f a b)")
        result = original.after_substituting(con("?x", "a"), {"y": parse("b")})
        assert result.pattern == parse("(f a b)")
        assert result.complexity is Complexity.SUCCESS
        assert original.pattern == parse("(f ?x ?y)")

    def test_after_substituting_unchanged(self) -> None:
        """An irrelevant substitution returns the same constraint."""
        original = con("(f ?x)", "(f a)")
        assert original.after_substituting({"z": parse("c")}) is original

    def test_after_substituting_reduces(self) -> None:
        """A function substituted into an application is reduced."""
        result = con("(@ ?P a)", "(g a)").after_substituting({"P": parse("(λ v , (g v))")})
        assert result.complexity is Complexity.SUCCESS

    def test_substitute(self) -> None:
        """Substitution replaces metavariables by name."""
        result = substitute(parse("(f ?x ?y)"), {"x": Symbol("1")})
        assert result == parse("(f 1 ?y)")


class TestBindingRemoval:
    """Tests for removing and restoring bindings."""

    def test_without_bindings(self) -> None:
        """Bindings become binding applications."""
        constraint = con("(∀ ?x , (P ?x))", "(∀ y , (P y))").without_bindings()
        assert constraint.pattern == Application(
            (BINDING_HEAD, Symbol("∀"), parse("?x"), parse("(P ?x)"))
        )
        assert constraint.complexity is Complexity.CHILDREN

    def test_functions_kept(self) -> None:
        """Expression functions stay bindings."""
        result = remove_bindings(parse("(λ v , (∀ x , v))"))
        assert is_ef(result)

    @pytest.mark.parametrize(
        "text",
        [
            "(∀ x , (P x))",
            "(f (∀ x y , (∃ z , (R x y z))))",
            "(λ v , (∀ x , (f v x)))",
            '(∀ x , x) +{"k":1}',
        ],
    )
    def test_round_trip(self, text: str) -> None:
        """Restoring undoes removal."""
        node = parse(text)
        assert restore_bindings(remove_bindings(node)) == node

    def test_cannot_restore_compound_parameter(self) -> None:
        """A parameter position holding an application cannot be restored."""
        node = Application((BINDING_HEAD, Symbol("∀"), parse("(f a)"), Symbol("x")))
        assert not can_restore_bindings(node)
        assert can_restore_bindings(remove_bindings(parse("(∀ x , x)")))

    def test_debruijn_round_trip(self) -> None:
        """Encoding then decoding a constraint gives it back."""
        constraint = con("(∀ ?x , (P ?x))", "(∀ y , (P y))")
        assert constraint.debruijn_encoded().debruijn_decoded() == constraint

    def test_debruijn_encoded(self) -> None:
        """Both sides are encoded."""
        encoded = con("(∀ ?x , (P ?x))", "(∀ y , (P y))").debruijn_encoded()
        assert encoded.pattern == parse("(∀ ?x , (P ⟨0.0⟩))")
        assert encoded.expression == parse("(∀ ⋅ , (P ⟨0.0⟩))")
