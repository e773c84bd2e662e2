"""Tests for the expression tree model."""

import pytest

from deductive.nodes import (
    Application,
    Binding,
    Declaration,
    Environment,
    Symbol,
    descendants,
    free_symbol_names,
    is_expression,
    symbols,
)
from deductive.notation import parse


class TestSymbol:
    """Tests for atomic symbols."""

    def test_equal_by_text(self) -> None:
        """Symbols with the same text are equal."""
        assert Symbol("x") == Symbol("x")
        assert Symbol("x") != Symbol("y")

    def test_metavariable_flag_is_identity(self) -> None:
        """A metavariable differs from the plain symbol with its text."""
        assert Symbol("x", metavariable=True) != Symbol("x")

    def test_is_atomic(self) -> None:
        """Symbols have no children."""
        assert Symbol("x").is_atomic()
        assert Symbol("x").children == ()

    def test_hashable(self) -> None:
        """Symbols can be used as set members."""
        assert len({Symbol("x"), Symbol("x"), Symbol("y")}) == 2


class TestApplication:
    """Tests for applications."""

    def test_operator_and_operands(self) -> None:
        """The first child is the operator, the rest are operands."""
        app = Application((Symbol("f"), Symbol("a"), Symbol("b")))
        assert app.operator == Symbol("f")
        assert app.operands == (Symbol("a"), Symbol("b"))

    def test_children_from_list(self) -> None:
        """Children given as a list are stored as a tuple."""
        app = Application([Symbol("f")])  # type: ignore[arg-type]
        assert app.children == (Symbol("f"),)

    def test_empty_application_rejected(self) -> None:
        """An application needs at least one child."""
        with pytest.raises(ValueError, match="at least one child"):
            Application(())

    def test_rebuild_keeps_attributes(self) -> None:
        """Rebuilding replaces children and keeps attributes."""
        app = Application((Symbol("f"), Symbol("a")), attributes=(("k", 1),))
        rebuilt = app.rebuild([Symbol("g")])
        assert rebuilt.children == (Symbol("g"),)
        assert rebuilt.attribute("k") == 1


class TestBinding:
    """Tests for bindings."""

    def test_children_order(self) -> None:
        """Children are the head, the parameters and then the body."""
        binding = parse("(∀ x y , (P x y))")
        assert isinstance(binding, Binding)
        assert binding.children == (
            Symbol("∀"),
            Symbol("x"),
            Symbol("y"),
            parse("(P x y)"),
        )

    def test_requires_a_parameter(self) -> None:
        """A binding with no parameters is rejected."""
        with pytest.raises(ValueError, match="at least one bound parameter"):
            Binding(Symbol("∀"), (), Symbol("x"))

    def test_parameters_must_be_symbols(self) -> None:
        """Parameters that are not symbols are rejected."""
        with pytest.raises(ValueError, match="must be Symbols"):
            Binding(Symbol("∀"), (parse("(f x)"),), Symbol("x"))  # type: ignore[arg-type]

    def test_rebuild(self) -> None:
        """Rebuilding splits children back into head, parameters and body."""
        binding = parse("(∀ x , x)")
        rebuilt = binding.rebuild([Symbol("∃"), Symbol("y"), Symbol("z"), Symbol("y")])
        assert rebuilt == parse("(∃ y z , y)")


class TestContainers:
    """Tests for environments and declarations."""

    def test_environment_given_flag(self) -> None:
        """The given flag is part of an environment's identity."""
        assert Environment((Symbol("a"),)) != Environment((Symbol("a"),), given=True)

    def test_empty_environment(self) -> None:
        """Environments may be empty."""
        assert Environment().children == ()

    def test_declaration_children_are_symbols(self) -> None:
        """A declaration's children are its declared symbols."""
        declaration = Declaration((Symbol("a"), Symbol("b")))
        assert declaration.children == (Symbol("a"), Symbol("b"))

    def test_is_expression(self) -> None:
        """Environments and declarations are not expressions."""
        assert is_expression(parse("(f x)"))
        assert is_expression(parse("(∀ x , x)"))
        assert not is_expression(parse("{ a }"))
        assert not is_expression(parse("[a]"))


class TestAttributes:
    """Tests for node attributes."""

    def test_order_does_not_matter(self) -> None:
        """Attribute order never affects equality."""
        first = Symbol("x", attributes=(("b", 1), ("a", 2)))
        second = Symbol("x", attributes=(("a", 2), ("b", 1)))
        assert first == second

    def test_attributes_affect_equality(self) -> None:
        """Nodes with different attributes are different."""
        assert Symbol("x").with_attribute("color", "red") != Symbol("x")

    def test_with_attribute_adds(self) -> None:
        """Adding an attribute keeps the existing ones."""
        node = Symbol("x").with_attribute("a", 1).with_attribute("b", 2)
        assert node.attribute("a") == 1
        assert node.attribute("b") == 2
        assert node.has_attribute("a")
        assert not node.has_attribute("c")

    def test_attribute_default(self) -> None:
        """Missing attributes return the default."""
        assert Symbol("x").attribute("missing", "none") == "none"

    def test_with_attributes_replaces(self) -> None:
        """Setting attributes replaces all of them."""
        node = Symbol("x").with_attribute("a", 1).with_attributes({"b": 2})
        assert not node.has_attribute("a")
        assert node.attribute("b") == 2

    def test_without_attributes(self) -> None:
        """Attributes can be stripped."""
        node = Symbol("x").with_attribute("a", 1)
        assert node.without_attributes() == Symbol("x")

    def test_original_unchanged(self) -> None:
        """Attribute updates return new nodes."""
        node = Symbol("x")
        node.with_attribute("a", 1)
        assert node.attributes == ()


class TestTraversal:
    """Tests for walking trees."""

    def test_child_path(self) -> None:
        """A path of indices leads to a descendant."""
        tree = parse("(f (g a b) c)")
        assert tree.child(1, 2) == Symbol("b")
        assert tree.child() is tree

    def test_descendants_preorder(self) -> None:
        """Descendants are listed parent before children."""
        tree = parse("(f (g a) b)")
        assert list(descendants(tree)) == [
            tree,
            Symbol("f"),
            parse("(g a)"),
            Symbol("g"),
            Symbol("a"),
            Symbol("b"),
        ]

    def test_symbols(self) -> None:
        """Every symbol is listed, bound or free."""
        texts = [s.text for s in symbols(parse("(∀ x , (P x y))"))]
        assert texts == ["∀", "x", "P", "x", "y"]

    def test_free_symbol_names(self) -> None:
        """Bound parameters are not free within their body."""
        assert free_symbol_names(parse("(∀ x , (P x y))")) == {"∀", "P", "y"}

    def test_free_symbol_names_nested(self) -> None:
        """A symbol bound in one branch can be free in another."""
        tree = parse("(and (∀ x , (P x)) (Q x))")
        assert "x" in free_symbol_names(tree)

    def test_str_uses_notation(self) -> None:
        """Nodes print in putdown notation."""
        assert str(parse("(f ?x (∀ y , y))")) == "(f ?x (∀ y , y))"
