# flowsmith/errors.py
from __future__ import annotations

from typing import Any, Iterable, List


class FlowsmithError(Exception):
    """Base class for every error raised by flowsmith."""


class UnsupportedScenario(FlowsmithError):
    """Raised when build() is asked for a category outside the fixed enumeration."""

    def __init__(self, category: Any, supported: Iterable[str]):
        self.category = category
        self.supported = list(supported)
        super().__init__(
            f"Unsupported scenario category {category!r}. "
            f"Choose one of: {', '.join(self.supported)}"
        )


class TemplateIntegrityError(FlowsmithError):
    """A scenario template produced a document that breaks the graph invariants."""

    def __init__(self, document_name: str, issues: List[str]):
        self.document_name = document_name
        self.issues = list(issues)
        joined = "; ".join(self.issues)
        super().__init__(f"Workflow '{document_name}' failed integrity checks: {joined}")


class UnknownSnippet(FlowsmithError):
    def __init__(self, key: str, available: Iterable[str]):
        self.key = key
        self.available = list(available)
        super().__init__(
            f"Unknown snippet '{key}'. Choose one of: {', '.join(self.available)}"
        )
