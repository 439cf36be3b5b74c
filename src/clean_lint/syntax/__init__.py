from clean_lint.syntax.nodes import Node, NodeKind, Span, walk, walk_scope
from clean_lint.syntax.parser import parse

__all__ = ["Node", "NodeKind", "Span", "parse", "walk", "walk_scope"]
