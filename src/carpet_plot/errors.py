"""Error and warning taxonomy for carpet-plot.

Every fatal condition raises a :class:`CarpetPlotError` subclass; the CLI maps
them to exit code 2. Non-fatal conditions are emitted as
:class:`CarpetPlotWarning` subclasses and recorded on the reconcile report.
"""

from __future__ import annotations

from typing import Any


class CarpetPlotError(Exception):
    """Base class for all fatal carpet-plot errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class InputError(CarpetPlotError):
    """Malformed numeric entry while prompting for a range."""


class FileSelectionError(CarpetPlotError):
    """The user cancelled the file picker."""


class MissingColumnsError(CarpetPlotError):
    """No ISP or Tc columns could be identified in the header row."""


class HeaderParseError(CarpetPlotError):
    """A classified header carries no extractable pressure value."""

    def __init__(self, header: str) -> None:
        super().__init__(f"Could not extract pressure from header: {header}", {"header": header})
        self.header = header


class ShapeMismatchError(CarpetPlotError):
    """A data matrix cannot be oriented as rows=O/F, columns=Pc."""


class NonNumericDataError(CarpetPlotError):
    """A cell that feeds the plot is blank or not a number."""


class CarpetPlotWarning(UserWarning):
    """Base class for non-fatal diagnostics."""


class PressureMismatchWarning(CarpetPlotWarning):
    """ISP and Tc headers carry different pressure sets."""


class RowCountMismatchNotice(CarpetPlotWarning):
    """The file's O/F row count differs from the requested O/F range."""
