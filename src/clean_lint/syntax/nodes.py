"""Tagged syntax tree the rules match against.

The tree-sitter concrete tree is lowered into this closed set of node cases.
Every case carries a ``kind`` tag and returns its children left-to-right, so
``walk`` gives a deterministic pre-order traversal. Nodes are frozen; rules
can read them but never change them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, Union


class NodeKind(str, Enum):
    PROGRAM = "program"
    VARIABLE = "variable"
    BINDING = "binding"
    FUNCTION = "function"
    PARAMETER = "parameter"
    CALL = "call"
    MEMBER = "member"
    OBJECT = "object"
    PROPERTY = "property"
    IF = "if"
    LOGICAL = "logical"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    OTHER = "other"


@dataclass(frozen=True)
class Span:
    line: int
    column: int
    end_line: int
    end_column: int
    start_byte: int = 0
    end_byte: int = 0


@dataclass(frozen=True)
class Program:
    span: Span
    body: tuple[Node, ...]
    kind: ClassVar[NodeKind] = NodeKind.PROGRAM

    def children(self) -> tuple[Node, ...]:
        return self.body


@dataclass(frozen=True)
class Binding:
    """A name introduced by a declaration or a parameter list."""

    span: Span
    name: str
    origin: str  # "var", "let", "const" or "parameter"
    kind: ClassVar[NodeKind] = NodeKind.BINDING

    def children(self) -> tuple[Node, ...]:
        return ()


@dataclass(frozen=True)
class VariableDeclarator:
    span: Span
    declaration: str
    targets: tuple[Binding, ...]
    destructured: bool
    value: Node | None
    kind: ClassVar[NodeKind] = NodeKind.VARIABLE

    def children(self) -> tuple[Node, ...]:
        return self.targets + _optional(self.value)


@dataclass(frozen=True)
class Parameter:
    span: Span
    name: str | None  # None when the parameter is a destructuring pattern
    targets: tuple[Binding, ...]
    default: Node | None
    kind: ClassVar[NodeKind] = NodeKind.PARAMETER

    def children(self) -> tuple[Node, ...]:
        return self.targets + _optional(self.default)


@dataclass(frozen=True)
class Function:
    span: Span
    name: str | None
    name_span: Span | None
    params: tuple[Parameter, ...]
    body: Node | None
    arrow: bool = False
    callback_of: str | None = None  # callee text when passed as a call argument
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION

    def children(self) -> tuple[Node, ...]:
        return self.params + _optional(self.body)

    def param_names(self) -> tuple[str, ...]:
        return tuple(param.name for param in self.params if param.name is not None)


@dataclass(frozen=True)
class Call:
    span: Span
    callee: Node
    arguments: tuple[Node, ...]
    constructor: bool = False
    kind: ClassVar[NodeKind] = NodeKind.CALL

    def children(self) -> tuple[Node, ...]:
        return (self.callee,) + self.arguments


@dataclass(frozen=True)
class Member:
    """``object.property`` or ``object[index]``."""

    span: Span
    object: Node
    property: str | None
    index: Node | None
    kind: ClassVar[NodeKind] = NodeKind.MEMBER

    def children(self) -> tuple[Node, ...]:
        return (self.object,) + _optional(self.index)


@dataclass(frozen=True)
class Property:
    span: Span
    key: str | None
    key_span: Span
    value: Node | None
    shorthand: bool = False
    kind: ClassVar[NodeKind] = NodeKind.PROPERTY

    def children(self) -> tuple[Node, ...]:
        return _optional(self.value)


@dataclass(frozen=True)
class ObjectLiteral:
    span: Span
    entries: tuple[Node, ...]
    kind: ClassVar[NodeKind] = NodeKind.OBJECT

    def children(self) -> tuple[Node, ...]:
        return self.entries

    def properties(self) -> tuple[Property, ...]:
        return tuple(entry for entry in self.entries if isinstance(entry, Property))


@dataclass(frozen=True)
class IfStatement:
    span: Span
    test: Node
    consequent: Node
    alternate: Node | None
    kind: ClassVar[NodeKind] = NodeKind.IF

    def children(self) -> tuple[Node, ...]:
        return (self.test, self.consequent) + _optional(self.alternate)


@dataclass(frozen=True)
class Logical:
    span: Span
    operator: str
    left: Node
    right: Node
    kind: ClassVar[NodeKind] = NodeKind.LOGICAL

    def children(self) -> tuple[Node, ...]:
        return (self.left, self.right)


@dataclass(frozen=True)
class Identifier:
    span: Span
    name: str
    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER

    def children(self) -> tuple[Node, ...]:
        return ()


@dataclass(frozen=True)
class NumberLiteral:
    span: Span
    raw: str
    value: int | float | None
    kind: ClassVar[NodeKind] = NodeKind.NUMBER

    def children(self) -> tuple[Node, ...]:
        return ()


@dataclass(frozen=True)
class StringLiteral:
    span: Span
    raw: str
    kind: ClassVar[NodeKind] = NodeKind.STRING

    def children(self) -> tuple[Node, ...]:
        return ()


@dataclass(frozen=True)
class Other:
    """Any construct without a dedicated case; keeps the tree-sitter type name."""

    span: Span
    type_name: str
    nodes: tuple[Node, ...] = ()
    kind: ClassVar[NodeKind] = NodeKind.OTHER

    def children(self) -> tuple[Node, ...]:
        return self.nodes


Node = Union[
    Program,
    VariableDeclarator,
    Binding,
    Function,
    Parameter,
    Call,
    Member,
    ObjectLiteral,
    Property,
    IfStatement,
    Logical,
    Identifier,
    NumberLiteral,
    StringLiteral,
    Other,
]


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in pre-order, left to right."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def walk_scope(node: Node) -> Iterator[Node]:
    """Like ``walk`` but does not descend into nested functions."""
    stack: list[Node] = list(reversed(node.children()))
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, Function):
            continue
        stack.extend(reversed(current.children()))


def _optional(node: Node | None) -> tuple[Node, ...]:
    return () if node is None else (node,)
