"""Error taxonomy for merge_core."""

from __future__ import annotations


class MergeCoreError(Exception):
    """Base class for all merge_core errors."""


# ---------------------------------------------------------------------------
# Configuration-time errors (fatal, abort startup)
# ---------------------------------------------------------------------------

class ConfigurationError(MergeCoreError):
    """Raised while parsing a format or declaring its sources."""


class FormatSyntaxError(ConfigurationError):
    """Malformed format specification."""

    def __init__(
        self,
        message: str,
        token: str | None = None,
        position: int | None = None,
    ) -> None:
        self.message = message
        self.token = token
        self.position = position
        super().__init__(self._describe())

    def _describe(self) -> str:
        text = self.message
        if self.token is not None:
            text += f": {self.token!r}"
        if self.position is not None:
            text += f" (at position {self.position})"
        return text


class IllegalRangeError(FormatSyntaxError):
    """Index range whose end lies before its start, or with too many parts."""


RangeError = IllegalRangeError


class SourceConnectionError(ConfigurationError):
    """A named source cannot be located or reached."""

    def __init__(self, name: str, reason: str = "cannot find requested source") -> None:
        self.name = name
        super().__init__(f"{reason}: {name}")


# ---------------------------------------------------------------------------
# Evaluation errors
# ---------------------------------------------------------------------------

class UnknownSourceError(MergeCoreError):
    """A selector referenced a source that was never declared."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"attempt to retrieve undeclared source: {name}")


class SelectionError(MergeCoreError):
    """Per-tick failure while selecting data; the tick is skipped."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source is not None:
            message = f"{message} (source {source})"
        super().__init__(message)


class IndexTypeError(SelectionError):
    """Attempted to index into a scalar (or a source without data)."""


class IndexOutOfRangeError(SelectionError):
    """Index beyond the length of the indexed list."""

    def __init__(self, source: str, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(
            f"index {index + 1} out of range for list of length {length}", source
        )
