"""Putdown-style text notation for trees.

Grammar, informally::

    node        := atom | string | application | binding | environment
                 | declaration, optionally followed by +{json attributes}
    application := "(" node+ ")"
    binding     := "(" head param+ "," body ")"
    environment := [":"] "{" node* "}"
    declaration := [":"] "[" symbol* "]"

A leading ``?`` makes a symbol a metavariable and a leading ``:`` marks a
node as given: environments and declarations carry a ``given`` field, other
nodes a ``"given"`` attribute. ``@`` stands for the expression
function application head and ``λ`` for the expression function head; a
binding written with ``@`` as its head is an expression function too.
Encoded trees print bound references as ``⟨depth.index⟩`` and anonymous
parameters as ``⋅name``; both read back in.
"""

from __future__ import annotations

import json
import re

from deductive.errors import NotationError
from deductive.matching.debruijn import SLOT_TEXT, BoundIndex, BoundSlot
from deductive.matching.reserved import APPLICATION_HEAD, FUNCTION_HEAD, is_marker
from deductive.nodes import (
    Application,
    Binding,
    Declaration,
    Environment,
    Node,
    Symbol,
)

_DELIMITERS = frozenset('(){}[],"')
_INDEX = re.compile(r"⟨(\d+)\.(\d+)⟩")
_SHORTHANDS = {"@": APPLICATION_HEAD, "λ": FUNCTION_HEAD}
_decoder = json.JSONDecoder()

GIVEN = "given"


class _Reader:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def fail(self, message: str) -> NotationError:
        return NotationError(message, position=self.pos)

    def skip_space(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def at_end(self) -> bool:
        self.skip_space()
        return self.pos >= len(self.text)

    def peek(self) -> str:
        self.skip_space()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            msg = f"Expected {char!r}"
            raise self.fail(msg)
        self.pos += 1

    def string(self) -> str:
        try:
            value, end = _decoder.raw_decode(self.text, self.pos)
        except json.JSONDecodeError as e:
            msg = "Malformed string literal"
            raise self.fail(msg) from e
        self.pos = end
        return value

    def atom(self) -> str:
        start = self.pos
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char.isspace() or char in _DELIMITERS:
                break
            self.pos += 1
        return self.text[start : self.pos]

    def node(self) -> Node:
        node = self._bare_node()
        if self.peek() == "+" and self.text.startswith("+{", self.pos):
            self.pos += 1
            try:
                attributes, end = _decoder.raw_decode(self.text, self.pos)
            except json.JSONDecodeError as e:
                msg = "Malformed attributes"
                raise self.fail(msg) from e
            self.pos = end
            node = node.with_attributes(attributes)
        return node

    def _bare_node(self) -> Node:  # noqa: PLR0911
        char = self.peek()
        match char:
            case "":
                msg = "Unexpected end of text"
                raise self.fail(msg)
            case "(":
                self.pos += 1
                return self._application_or_binding()
            case ":":
                self.pos += 1
                if self.peek() in ("{", "["):
                    return self._container(given=True)
                return self.node().with_attribute(GIVEN, True)
            case "{" | "[":
                return self._container(given=False)
            case '"':
                return Symbol(self.string())
            case ")" | "}" | "]" | ",":
                msg = f"Unexpected {char!r}"
                raise self.fail(msg)
        return self._symbol()

    def _symbol(self) -> Node:
        if self.text.startswith('?"', self.pos):
            self.pos += 1
            return Symbol(self.string(), metavariable=True)
        text = self.atom()
        if text in _SHORTHANDS:
            return _SHORTHANDS[text]
        if text.startswith("?") and len(text) > 1:
            return Symbol(text[1:], metavariable=True)
        if text.startswith(SLOT_TEXT):
            return BoundSlot(origin=text[len(SLOT_TEXT) :])
        if found := _INDEX.fullmatch(text):
            return BoundIndex(int(found.group(1)), int(found.group(2)))
        return Symbol(text)

    def _application_or_binding(self) -> Node:
        children: list[Node] = []
        while self.peek() not in (")", ","):
            children.append(self.node())
        if self.peek() == ")":
            self.pos += 1
            if not children:
                msg = "Empty application"
                raise self.fail(msg)
            return Application(tuple(children))
        self.pos += 1
        if len(children) < 2:  # noqa: PLR2004
            msg = "A binding needs a head and at least one parameter"
            raise self.fail(msg)
        body = self.node()
        self.expect(")")
        head, *parameters = children
        if not all(isinstance(p, Symbol) for p in parameters):
            msg = "Bound parameters must be symbols"
            raise self.fail(msg)
        if is_marker(head, APPLICATION_HEAD):
            head = FUNCTION_HEAD
        return Binding(head, tuple(parameters), body)  # type: ignore[arg-type]

    def _container(self, *, given: bool) -> Node:
        opener = self.peek()
        closer = "}" if opener == "{" else "]"
        self.pos += 1
        children: list[Node] = []
        while self.peek() != closer:
            children.append(self.node())
        self.pos += 1
        if opener == "{":
            return Environment(tuple(children), given=given)
        if not all(isinstance(c, Symbol) for c in children):
            msg = "Declarations may only contain symbols"
            raise self.fail(msg)
        return Declaration(tuple(children), given=given)  # type: ignore[arg-type]


def parse_all(text: str) -> list[Node]:
    """Read every tree in ``text``.

    Raises:
        NotationError: If ``text`` is not well formed.

    """
    reader = _Reader(text)
    nodes: list[Node] = []
    while not reader.at_end():
        nodes.append(reader.node())
    return nodes


def parse(text: str) -> Node:
    """Read exactly one tree.

    Raises:
        NotationError: If ``text`` is malformed or holds other than one tree.

    """
    nodes = parse_all(text)
    if len(nodes) != 1:
        msg = f"Expected one tree, found {len(nodes)}"
        raise NotationError(msg)
    return nodes[0]


def _needs_quotes(text: str) -> bool:
    return (
        not text
        or text in _SHORTHANDS
        or text[0] in "?:"
        or text.startswith(SLOT_TEXT)
        or _INDEX.fullmatch(text) is not None
        or any(c.isspace() or c in _DELIMITERS for c in text)
    )


def _symbol_text(text: str) -> str:
    return json.dumps(text, ensure_ascii=False) if _needs_quotes(text) else text


def _bare(node: Node) -> str:  # noqa: PLR0911
    match node:
        case BoundIndex(depth=depth, index=index):
            return f"⟨{depth}.{index}⟩"
        case BoundSlot(origin=origin):
            return SLOT_TEXT + origin
        case Symbol() if is_marker(node, APPLICATION_HEAD):
            return "@"
        case Symbol() if is_marker(node, FUNCTION_HEAD):
            return "λ"
        case Symbol(text=text, metavariable=True):
            return "?" + _symbol_text(text)
        case Symbol(text=text):
            return _symbol_text(text)
        case Binding(head=head, parameters=parameters, body=body):
            inner = " ".join(to_putdown(p) for p in (head, *parameters))
            return f"({inner} , {to_putdown(body)})"
        case Application(children=children):
            return "(" + " ".join(to_putdown(c) for c in children) + ")"
        case Environment(children=children, given=given):
            inner = " ".join(to_putdown(c) for c in children)
            return (":" if given else "") + "{ " + inner + (" }" if inner else "}")
        case Declaration(symbols=symbols, given=given):
            inner = " ".join(to_putdown(s) for s in symbols)
            return (":" if given else "") + "[" + inner + "]"
    msg = f"Cannot write {type(node).__name__} in putdown notation"
    raise NotationError(msg)


def to_putdown(node: Node) -> str:
    """Write ``node`` so that ``parse`` reads it back as an equal tree."""
    text = _bare(node)
    attributes = dict(node.attributes)
    if attributes.get(GIVEN) is True and not isinstance(node, Environment | Declaration):
        del attributes[GIVEN]
        text = ":" + text
    if attributes:
        text += " +" + json.dumps(attributes, ensure_ascii=False, default=repr)
    return text
