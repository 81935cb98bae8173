from typing import Any, Optional


class TranslationError(Exception):
    """
    A recoverable translation failure.

    The declaration (or binding / case element) being translated is dropped
    and translation continues with the next sibling.
    """

    reason = "translation error"

    def __init__(self, node: Any = None, message: Optional[str] = None) -> None:
        self.node = node
        super().__init__(message or self.reason)

    @property
    def node_type(self) -> Optional[str]:
        return getattr(self.node, "type", None)

    @property
    def line(self) -> Optional[int]:
        point = getattr(self.node, "start_point", None)
        if point is None:
            return None
        return point[0] + 1


class BadType(TranslationError):
    """Unsupported type node shape (metatypes, member types...)."""
    reason = "unsupported type"


class BadRequirement(TranslationError):
    """Unsupported generic constraint shape."""
    reason = "unsupported requirement"


class IncompleteSource(TranslationError):
    """A required child node (e.g. a parameter type) is missing."""
    reason = "incomplete source"


class OtherBadness(TranslationError):
    """A value outside its declared enumeration."""
    reason = "unexpected value"


class TranslatorInvariantError(RuntimeError):
    """
    Raised when the translator or renderer reaches a state that valid input
    can never produce. Never caught by the library.
    """
