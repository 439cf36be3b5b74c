"""
JavaScript parsing with tree-sitter-javascript.

parse() runs the tree-sitter parser, rejects trees that contain ERROR or
MISSING nodes with a ParseError, and lowers the concrete tree into the tagged
node set from clean_lint.syntax.nodes.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import tree_sitter_javascript
from tree_sitter import Language, Node as TSNode, Parser

from clean_lint.errors import ParseError
from clean_lint.syntax.nodes import (
    Binding,
    Call,
    Function,
    Identifier,
    IfStatement,
    Logical,
    Member,
    Node,
    NumberLiteral,
    ObjectLiteral,
    Other,
    Parameter,
    Program,
    Property,
    Span,
    StringLiteral,
    VariableDeclarator,
)

logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tree_sitter_javascript.language())

FUNCTION_TYPES = {
    "function_declaration",
    "function_expression",
    "function",
    "generator_function_declaration",
    "generator_function",
    "arrow_function",
    "method_definition",
}

LOGICAL_OPERATORS = {"||", "&&", "??"}


def parse(source: str | bytes) -> Program:
    """Parse JavaScript source into a Program node or raise ParseError."""
    data = source.encode("utf-8") if isinstance(source, str) else source

    # Parser instances are not shared between threads.
    parser = Parser(JS_LANGUAGE)
    tree = parser.parse(data)
    root = tree.root_node

    lowering = _Lowering(data)
    if root.has_error:
        bad = _first_error(root) or root
        line, column = lowering.position(bad.start_point)
        if bad.is_missing:
            message = f"missing {bad.type}"
        else:
            snippet = lowering.text(bad).strip().splitlines()
            message = f"unexpected {snippet[0][:40]!r}" if snippet else "syntax error"
        raise ParseError(message, line, column)

    return lowering.program(root)


def _first_error(root: TSNode) -> TSNode | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        stack.extend(
            child for child in reversed(node.children) if child.has_error or child.is_missing or child.is_error
        )
    return None


class _Lowering:
    def __init__(self, source: bytes):
        self.source = source
        self.lines = source.split(b"\n")
        # tree-sitter node id -> lowered nodes, filled children first
        self.lowered: dict[int, tuple[Node, ...]] = {}

    def text(self, node: TSNode) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def position(self, point) -> tuple[int, int]:
        row, byte_column = point[0], point[1]
        if row < len(self.lines):
            prefix = self.lines[row][:byte_column]
            return row + 1, len(prefix.decode("utf-8", errors="replace")) + 1
        return row + 1, byte_column + 1

    def span(self, node: TSNode) -> Span:
        line, column = self.position(node.start_point)
        end_line, end_column = self.position(node.end_point)
        return Span(
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
            start_byte=node.start_byte,
            end_byte=node.end_byte,
        )

    def program(self, root: TSNode) -> Program:
        stack: list[tuple[TSNode, bool]] = [
            (child, False) for child in root.named_children if child.type != "comment"
        ]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                self.lowered[node.id] = self._lower_node(node)
                continue
            stack.append((node, True))
            stack.extend((child, False) for child in node.named_children if child.type != "comment")
        return Program(span=self.span(root), body=self.lower_all(root.named_children))

    def lower_all(self, nodes) -> tuple[Node, ...]:
        lowered: list[Node] = []
        for child in nodes:
            if child.type == "comment":
                continue
            lowered.extend(self.lower(child))
        return tuple(lowered)

    def lower(self, node: TSNode) -> tuple[Node, ...]:
        cached = self.lowered.get(node.id)
        if cached is not None:
            return cached
        return self._lower_node(node)

    def _lower_node(self, node: TSNode) -> tuple[Node, ...]:
        kind = node.type
        if kind in ("lexical_declaration", "variable_declaration"):
            return (self.declaration(node),)
        if kind in FUNCTION_TYPES:
            return (self.function(node),)
        if kind in ("call_expression", "new_expression"):
            return (self.call(node),)
        if kind in ("member_expression", "subscript_expression"):
            return (self.member(node),)
        if kind == "object":
            return (self.object(node),)
        if kind == "if_statement":
            return (self.if_statement(node),)
        if kind == "binary_expression":
            return (self.binary(node),)
        if kind == "identifier":
            return (Identifier(span=self.span(node), name=self.text(node)),)
        if kind == "number":
            raw = self.text(node)
            return (NumberLiteral(span=self.span(node), raw=raw, value=_number_value(raw)),)
        if kind == "string":
            return (StringLiteral(span=self.span(node), raw=self.text(node)),)
        return (Other(span=self.span(node), type_name=kind, nodes=self.lower_all(node.named_children)),)

    def lower_one(self, node: TSNode | None) -> Node | None:
        if node is None:
            return None
        lowered = self.lower(node)
        return lowered[0] if lowered else None

    def declaration(self, node: TSNode) -> Other:
        kind_node = node.child_by_field_name("kind")
        if kind_node is not None:
            declaration = kind_node.type
        elif node.type == "variable_declaration":
            declaration = "var"
        else:
            declaration = self.text(node).split(None, 1)[0]

        declarators: list[Node] = []
        for child in node.named_children:
            if child.type != "variable_declarator":
                continue
            name_node = child.child_by_field_name("name")
            targets = self.bindings(name_node, declaration) if name_node is not None else ()
            declarators.append(
                VariableDeclarator(
                    span=self.span(child),
                    declaration=declaration,
                    targets=targets,
                    destructured=name_node is not None and name_node.type != "identifier",
                    value=self.lower_one(child.child_by_field_name("value")),
                )
            )
        return Other(span=self.span(node), type_name=node.type, nodes=tuple(declarators))

    def bindings(self, node: TSNode, origin: str) -> tuple[Binding, ...]:
        collected: list[Binding] = []
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type in ("identifier", "shorthand_property_identifier_pattern"):
                collected.append(Binding(span=self.span(current), name=self.text(current), origin=origin))
            elif current.type == "pair_pattern":
                value = current.child_by_field_name("value")
                if value is not None:
                    stack.append(value)
            elif current.type in ("assignment_pattern", "object_assignment_pattern"):
                left = current.child_by_field_name("left")
                if left is not None:
                    stack.append(left)
            else:
                stack.extend(child for child in reversed(current.named_children) if child.type != "comment")
        return tuple(collected)

    def function(self, node: TSNode) -> Function:
        name_node = node.child_by_field_name("name")
        params_node = node.child_by_field_name("parameters")
        if params_node is not None:
            params = tuple(
                self.parameter(child) for child in params_node.named_children if child.type != "comment"
            )
        else:
            single = node.child_by_field_name("parameter")
            params = (self.parameter(single),) if single is not None else ()

        return Function(
            span=self.span(node),
            name=self.text(name_node) if name_node is not None else None,
            name_span=self.span(name_node) if name_node is not None else None,
            params=params,
            body=self.lower_one(node.child_by_field_name("body")),
            arrow=node.type == "arrow_function",
        )

    def parameter(self, node: TSNode) -> Parameter:
        target = node
        default = None
        if node.type == "assignment_pattern":
            target = node.child_by_field_name("left") or node
            default = self.lower_one(node.child_by_field_name("right"))

        return Parameter(
            span=self.span(node),
            name=self.text(target) if target.type == "identifier" else None,
            targets=self.bindings(target, "parameter"),
            default=default,
        )

    def call(self, node: TSNode) -> Call:
        constructor = node.type == "new_expression"
        callee_node = node.child_by_field_name("constructor" if constructor else "function")
        callee = self.lower_one(callee_node)
        if callee is None:
            callee = Other(span=self.span(node), type_name="callee")
        callee_text = " ".join(self.text(callee_node).split()) if callee_node is not None else ""

        arguments: list[Node] = []
        args_node = node.child_by_field_name("arguments")
        if args_node is not None and args_node.type == "arguments":
            for argument in self.lower_all(args_node.named_children):
                if isinstance(argument, Function):
                    argument = replace(argument, callback_of=callee_text)
                arguments.append(argument)
        elif args_node is not None:
            # tagged template literal
            arguments.extend(self.lower(args_node))

        return Call(span=self.span(node), callee=callee, arguments=tuple(arguments), constructor=constructor)

    def member(self, node: TSNode) -> Member:
        object_node = self.lower_one(node.child_by_field_name("object"))
        if object_node is None:
            object_node = Other(span=self.span(node), type_name="object")
        if node.type == "subscript_expression":
            return Member(
                span=self.span(node),
                object=object_node,
                property=None,
                index=self.lower_one(node.child_by_field_name("index")),
            )
        property_node = node.child_by_field_name("property")
        return Member(
            span=self.span(node),
            object=object_node,
            property=self.text(property_node) if property_node is not None else None,
            index=None,
        )

    def object(self, node: TSNode) -> ObjectLiteral:
        entries: list[Node] = []
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type == "pair":
                key_node = child.child_by_field_name("key")
                entries.append(
                    Property(
                        span=self.span(child),
                        key=_property_key(key_node, self.text(key_node)) if key_node is not None else None,
                        key_span=self.span(key_node if key_node is not None else child),
                        value=self.lower_one(child.child_by_field_name("value")),
                    )
                )
            elif child.type == "shorthand_property_identifier":
                entries.append(
                    Property(
                        span=self.span(child),
                        key=self.text(child),
                        key_span=self.span(child),
                        value=None,
                        shorthand=True,
                    )
                )
            else:
                entries.extend(self.lower(child))
        return ObjectLiteral(span=self.span(node), entries=tuple(entries))

    def if_statement(self, node: TSNode) -> IfStatement:
        condition = node.child_by_field_name("condition")
        if condition is not None and condition.type == "parenthesized_expression":
            inner = [child for child in condition.named_children if child.type != "comment"]
            condition = inner[0] if inner else condition
        test = self.lower_one(condition) or Other(span=self.span(node), type_name="condition")
        consequent = self.lower_one(node.child_by_field_name("consequence")) or Other(
            span=self.span(node), type_name="statement_block"
        )

        alternate = None
        else_clause = node.child_by_field_name("alternative")
        if else_clause is not None:
            branches = [child for child in else_clause.named_children if child.type != "comment"]
            alternate = self.lower_one(branches[0]) if branches else None

        return IfStatement(span=self.span(node), test=test, consequent=consequent, alternate=alternate)

    def binary(self, node: TSNode) -> Node:
        operator_node = node.child_by_field_name("operator")
        operator = self.text(operator_node) if operator_node is not None else ""
        left = self.lower_one(node.child_by_field_name("left"))
        right = self.lower_one(node.child_by_field_name("right"))
        if operator in LOGICAL_OPERATORS and left is not None and right is not None:
            return Logical(span=self.span(node), operator=operator, left=left, right=right)
        return Other(span=self.span(node), type_name=node.type, nodes=tuple(n for n in (left, right) if n))


def _property_key(node: TSNode, text: str) -> str | None:
    if node.type in ("property_identifier", "private_property_identifier", "number"):
        return text
    if node.type == "string":
        return text[1:-1]
    return None


def _number_value(raw: str) -> int | float | None:
    text = raw.replace("_", "").lower()
    if text.endswith("n"):
        text = text[:-1]
    try:
        if text.startswith(("0x", "0o", "0b")):
            return int(text, 0)
        value = float(text)
    except ValueError:
        logger.debug(f"Unrecognized numeric literal: {raw}")
        return None
    return int(value) if value.is_integer() and "." not in text and "e" not in text else value
