"""
Exceptions raised by the cheat sheet pipeline.
"""


class CheatSheetError(Exception):
    """Base class for all cheat sheet generation errors."""


class ValidationError(CheatSheetError):
    """The outline is structurally unusable (not JSON, no sections list, ...)."""


class RenderError(CheatSheetError):
    """The PDF backend could not produce a valid document.

    Fatal for the request: no partial bytes are ever returned alongside it.
    """


class GenerationError(CheatSheetError):
    """No module of a multi-module run produced any content."""

    def __init__(self, message: str, warnings=None):
        super().__init__(message)
        self.warnings = list(warnings or [])
