"""Metavariable tagging.

A metavariable is a Symbol constructed with ``metavariable=True``; the flag
is part of the symbol's identity, so ``x`` and ``?x`` are different symbols.
"""

from __future__ import annotations

from dataclasses import replace

from deductive.nodes import Node, Symbol, descendants


def metavariable(text: str) -> Symbol:
    return Symbol(text, metavariable=True)


def is_metavariable(node: Node) -> bool:
    return isinstance(node, Symbol) and node.metavariable


def as_metavariable(symbol: Symbol) -> Symbol:
    return symbol if symbol.metavariable else replace(symbol, metavariable=True)


def as_plain_symbol(symbol: Symbol) -> Symbol:
    return replace(symbol, metavariable=False) if symbol.metavariable else symbol


def contains_metavariable(node: Node) -> bool:
    return any(is_metavariable(d) for d in descendants(node))


def metavariable_names(node: Node) -> set[str]:
    """Every distinct metavariable name occurring in ``node``."""
    return {d.text for d in descendants(node) if isinstance(d, Symbol) and d.metavariable}
