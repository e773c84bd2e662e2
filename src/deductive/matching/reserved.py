"""Reserved head symbols used to encode functions and removed bindings.

Trees built from user input never contain these symbols except through the
notation shorthands ``@`` and ``λ``, so matching can treat them as markers.
"""

from __future__ import annotations

from deductive.nodes import Application, Binding, Node, Symbol

FUNCTION_HEAD = Symbol("LDE lambda")
APPLICATION_HEAD = Symbol("LDE EFA")
BINDING_HEAD = Symbol("LDE binding")

RESERVED_TEXTS = frozenset(
    s.text for s in (FUNCTION_HEAD, APPLICATION_HEAD, BINDING_HEAD)
)


def is_marker(node: Node, marker: Symbol) -> bool:
    """True if ``node`` is the marker symbol, whatever its attributes."""
    return (
        isinstance(node, Symbol)
        and not node.metavariable
        and node.text == marker.text
    )


def is_reserved(node: Node) -> bool:
    return (
        isinstance(node, Symbol)
        and not node.metavariable
        and node.text in RESERVED_TEXTS
    )


def is_function_binding(node: Node) -> bool:
    """A Binding whose head is the expression-function marker."""
    return isinstance(node, Binding) and is_marker(node.head, FUNCTION_HEAD)


def is_binding_application(node: Node) -> bool:
    """An Application standing in for a Binding whose bindings were removed.

    Layout: ``(BINDING_HEAD head p1 ... pn body)`` with ``n >= 1``.
    """
    return (
        isinstance(node, Application)
        and len(node.children) >= 4  # noqa: PLR2004
        and is_marker(node.children[0], BINDING_HEAD)
    )
