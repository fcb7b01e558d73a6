"""
Renders LIVEXPR syntax trees as Mermaid flowcharts.

This module defines the `MermaidEmitter` class, used by the `Diagrammer` to turn
a tree into ``flowchart TD`` text. Each node becomes a labeled box and each
parent/child relation a directed edge.

Node ids:
    The root is ``0_``. Child ``i`` of a node with id ``p`` gets id ``p + i + "_"``,
    so ids encode the path from the root and never collide.

Labels:
    - `operation`: the concatenated text of its operator children (e.g. ``+``)
    - `brackets`: ``( )``
    - `has-error`: ``has-error``
    - leaves: their text

Escaping:
    Label characters that Mermaid reserves are written as ``#NNNN;`` entities,
    where ``NNNN`` is the last four digits of the zero-padded decimal code point.
"""

import re
from typing import assert_never

from livexpr.livexpr_ast import ASTNode, Branch, Leaf

_RESERVED = re.compile(r"[\x00-\x2f\x3a-\x40\x5b-\x60\x7b-\xff]")


def escape_mermaid(unsafe: str) -> str:
    """Replaces every reserved character with its ``#NNNN;`` entity."""
    return _RESERVED.sub(lambda m: "#" + ("000" + str(ord(m.group(0))))[-4:] + ";", unsafe)


def node_label(node: ASTNode) -> str:
    """Returns the escaped label of a single node."""
    if isinstance(node, Branch):
        if node.kind == "operation":
            text = "".join(
                child.text
                for child in node.children
                if isinstance(child, Leaf) and child.kind == "operator"
            )
        elif node.kind == "brackets":
            text = "( )"
        elif node.kind == "has-error":
            text = "has-error"
        else:
            assert_never(node.kind)
    elif isinstance(node, Leaf):
        text = node.text
    else:
        assert_never(node)
    return escape_mermaid(text)


def make_node_id(prefix: str, index: int) -> str:
    return f"{prefix}{index}_"


class MermaidEmitter:
    """Emits a Mermaid flowchart from a LIVEXPR tree.

    Attributes:
        lines (list[str]): Accumulated flowchart lines.
        direction (str): Flowchart direction (``TD`` top-down by default).
    """

    def __init__(self, direction: str = "TD") -> None:
        self.lines: list[str] = []
        self.direction = direction

    def get_output(self) -> str:
        """Returns the flowchart, one statement per line, newline-terminated."""
        return "".join(f"{line}\n" for line in [f"flowchart {self.direction}"] + self.lines)

    def emit_root(self, root: ASTNode) -> None:
        root_id = make_node_id("", 0)
        self.lines.append(f'{root_id}["{node_label(root)}"]')
        self.emit_children(root, root_id)

    def emit_children(self, node: ASTNode, node_id: str) -> None:
        """Emits one edge per descendant, depth-first, left to right."""
        stack = _child_edges(node, node_id)
        while stack:
            parent_id, label, child, child_id = stack.pop()
            self.lines.append(
                f'{parent_id}["{label}"] --> {child_id}["{node_label(child)}"]'
            )
            stack.extend(_child_edges(child, child_id))


def _child_edges(node: ASTNode, node_id: str) -> list[tuple[str, str, ASTNode, str]]:
    # Reversed, so popping visits the first child first
    if isinstance(node, Leaf):
        return []
    label = node_label(node)
    return [
        (node_id, label, child, make_node_id(node_id, i))
        for i, child in reversed(list(enumerate(node.children)))
    ]


__all__ = ["MermaidEmitter", "escape_mermaid", "make_node_id", "node_label"]
