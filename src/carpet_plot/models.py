"""Data models shared across the package."""

from __future__ import annotations

import math
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from numbers import Integral, Real
from pathlib import Path
from typing import Any

import numpy as np

from carpet_plot.errors import InputError, NonNumericDataError, ShapeMismatchError

# Absorbs float error in (max - min) / step so that e.g. 1.0:0.1:2.0 keeps 2.0.
_RANGE_EPS = 1e-9


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


def _to_finite_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InputError(f"{field_name} must be a number")
    result = float(value)
    if not math.isfinite(result):
        raise InputError(f"{field_name} must be finite")
    return result


@dataclass(frozen=True)
class RangeSpec(Sequence[float]):
    """An inclusive arithmetic range ``minimum:step:maximum``.

    ``step`` must be positive. A range whose maximum lies below its minimum
    is legal and expands to nothing. Items are computed on access, so a fine
    step over a wide span costs nothing until it is expanded.
    """

    minimum: float
    maximum: float
    step: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "minimum", _to_finite_float(self.minimum, "minimum"))
        object.__setattr__(self, "maximum", _to_finite_float(self.maximum, "maximum"))
        object.__setattr__(self, "step", _to_finite_float(self.step, "step"))
        if self.step <= 0:
            raise InputError("step must be > 0")
        if (self.maximum - self.minimum) / self.step >= sys.maxsize:
            raise InputError("range has too many values; use a larger step")

    def __len__(self) -> int:
        if self.maximum < self.minimum:
            return 0
        return math.floor((self.maximum - self.minimum) / self.step + _RANGE_EPS) + 1

    def __getitem__(self, index: int | slice) -> float | list[float]:  # type: ignore[override]
        n = len(self)
        if isinstance(index, slice):
            return [self[i] for i in range(n)[index]]
        if index < 0:
            index += n
        if not 0 <= index < n:
            raise IndexError("RangeSpec index out of range")
        return self.minimum + index * self.step

    def __iter__(self) -> Iterator[float]:
        for i in range(len(self)):
            yield self.minimum + i * self.step

    def __contains__(self, value: object) -> bool:
        """Tolerant membership by arithmetic, without expanding the range."""
        if isinstance(value, bool) or not isinstance(value, Real):
            return False
        k = round((float(value) - self.minimum) / self.step)
        return 0 <= k < len(self) and math.isclose(
            self.minimum + k * self.step, float(value), rel_tol=1e-9, abs_tol=1e-9
        )

    def __str__(self) -> str:
        return f"{self.minimum:g}:{self.step:g}:{self.maximum:g}"

    def values(self) -> list[float]:
        """Expand to ``[minimum, minimum + step, ...]`` up to ``maximum``."""
        return list(self)


@dataclass
class ColumnGroups:
    """Header names classified per marker, in table order."""

    isp: list[str] = field(default_factory=list)
    tc: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.isp = _to_string_list(self.isp, "isp")
        self.tc = _to_string_list(self.tc, "tc")


@dataclass
class ReconcileReport:
    """Non-fatal diagnostics produced while reconciling a table.

    ``warnings`` hold pressure-header mismatches; ``notices`` hold axis
    substitutions and advisory range differences.
    """

    rows_in: int = 0
    rows_out: int = 0
    warnings: list[str] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.rows_out = _to_non_negative_int(self.rows_out, "rows_out")
        self.warnings = _to_string_list(self.warnings, "warnings")
        self.notices = _to_string_list(self.notices, "notices")
        if self.rows_out > self.rows_in:
            raise ValueError("rows_out must be <= rows_in")

    @property
    def dropped_rows(self) -> int:
        return self.rows_in - self.rows_out


@dataclass
class ReconciledDataset:
    """Chart-ready data: rows follow ``of``, columns follow ``pc``.

    Contract invariant: ``isp.shape == tc.shape == (len(of), len(pc))`` and no
    cell is NaN.
    """

    of: np.ndarray
    pc: np.ndarray
    isp: np.ndarray
    tc: np.ndarray
    isp_columns: list[str] = field(default_factory=list)
    tc_columns: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.of = np.asarray(self.of, dtype=float).reshape(-1)
        self.pc = np.asarray(self.pc, dtype=float).reshape(-1)
        self.isp = np.asarray(self.isp, dtype=float)
        self.tc = np.asarray(self.tc, dtype=float)
        self.isp_columns = _to_string_list(self.isp_columns, "isp_columns")
        self.tc_columns = _to_string_list(self.tc_columns, "tc_columns")

        expected = (len(self.of), len(self.pc))
        for name, matrix in (("Isp", self.isp), ("Tc", self.tc)):
            if matrix.ndim != 2 or matrix.shape != expected:
                raise ShapeMismatchError(
                    f"{name} matrix has shape {matrix.shape}, expected {expected} "
                    "(rows = O/F, columns = Pc)"
                )
            if np.isnan(matrix).any():
                raise NonNumericDataError(f"{name} matrix contains missing values")
        for name, columns in (("isp_columns", self.isp_columns), ("tc_columns", self.tc_columns)):
            if columns and len(columns) != len(self.pc):
                raise ValueError(f"{name} must have one header per pressure")

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.of), len(self.pc)


@dataclass
class RunContext:
    """State of a single interactive run, built fresh per invocation."""

    of_range: RangeSpec | None = None
    pc_range: RangeSpec | None = None
    input_path: Path | None = None
    quiet: bool = False

    # Unexpanded; reconcile only materializes a range it actually uses.
    @property
    def of_values(self) -> Sequence[float]:
        return self.of_range if self.of_range is not None else ()

    @property
    def pc_values(self) -> Sequence[float]:
        return self.pc_range if self.pc_range is not None else ()
