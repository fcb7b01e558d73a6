import os
from typing import Any

import pytest

from livexpr.livexpr_ast import ASTNode
from livexpr.livexpr_lexer import tokenize
from livexpr.livexpr_parser import parse

# Subprocess coverage for the CLI tests, when requested
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


@pytest.fixture  # type: ignore[misc]
def tree_of() -> Any:
    def build(source: str) -> ASTNode:
        return parse(tokenize(source))

    return build
