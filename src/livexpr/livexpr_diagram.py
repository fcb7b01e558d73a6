"""
Provides the `Diagrammer` class and the emitter interface for rendering LIVEXPR trees.

Classes and Features:
    - Emitter (Protocol): Interface for all diagram emitters. Requires `emit_root` and `get_output`.
    - MermaidEmitter: Concrete emitter producing Mermaid ``flowchart`` text.
    - Diagrammer: Selects an emitter by target name and renders one tree with it.

Example:
    >>> from livexpr.livexpr_parser import parse_text
    >>> print(Diagrammer("mermaid").render(parse_text("1+2")), end="")
    flowchart TD
    0_["#0043;"]
    0_["#0043;"] --> 0_0_["1"]
    0_["#0043;"] --> 0_1_["#0043;"]
    0_["#0043;"] --> 0_2_["2"]

Raises:
    ValueError: If the target is not supported.
    TypeError: If the object to render is not a tree node.
"""

import logging
from typing import Protocol

from livexpr.emitters.mermaid_emitter import MermaidEmitter
from livexpr.livexpr_ast import ASTNode, Branch, Leaf

LOG = logging.getLogger(__name__)


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all LIVEXPR diagram emitters."""

    def emit_root(self, root: ASTNode) -> None: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

EMITTERS: dict[str, EmitterType] = {
    "mermaid": MermaidEmitter,
    "mmd": MermaidEmitter,
}


class Diagrammer:
    """Renders a tree with the emitter registered for a target name.

    Attributes:
        target (str): The normalized target name.
    """

    def __init__(self, target: str = "mermaid") -> None:
        """Initializes the diagrammer with the desired output target.

        Raises:
            ValueError: If the target is not supported.
        """
        target = target.lower()
        if target not in EMITTERS:
            raise ValueError(f"Unknown diagram target: {target!r}")
        self.target = target

    def render(self, tree: ASTNode) -> str:
        """Renders ``tree`` with a fresh emitter.

        Raises:
            TypeError: If ``tree`` is not a Branch or Leaf.
        """
        if not isinstance(tree, (Branch, Leaf)):
            raise TypeError("Diagram input must be a Branch or Leaf node.")
        emitter = EMITTERS[self.target]()
        emitter.emit_root(tree)
        output = emitter.get_output()
        LOG.debug("rendered %s diagram with %d lines", self.target, output.count("\n"))
        return output


__all__ = ["Diagrammer", "EMITTERS", "Emitter", "EmitterType"]
