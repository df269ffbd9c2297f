"""Classification + reconciliation pipeline — pure functions, no I/O."""

from __future__ import annotations

import re
import warnings
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import NamedTuple

import numpy as np
import pandas as pd

from carpet_plot import ISP_MARKER, TC_MARKER
from carpet_plot.errors import (
    HeaderParseError,
    MissingColumnsError,
    NonNumericDataError,
    PressureMismatchWarning,
    RowCountMismatchNotice,
    ShapeMismatchError,
)
from carpet_plot.models import ColumnGroups, RangeSpec, ReconciledDataset, ReconcileReport

# First run of digits and dots that holds at least one digit.
_PRESSURE_TOKEN_RE = re.compile(r"[0-9.]*[0-9][0-9.]*")
_MAX_BAD_ROWS_LISTED = 5


class PressureAlignment(NamedTuple):
    pc: list[float]
    isp_index: list[int]
    tc_index: list[int]
    mismatch: bool


def _fmt_values(values: Iterable[float]) -> str:
    return "[" + ", ".join(f"{v:g}" for v in values) + "]"


# ── Column classification ───────────────────────────────────────


def _has_marker(name: object, marker: str) -> bool:
    return marker.casefold() in str(name).casefold()


def classify_columns(names: Iterable[object]) -> ColumnGroups:
    """Split header *names* into ISP and Tc groups by case-insensitive marker.

    Membership is independent: a header may land in both groups.
    """
    headers = [str(name) for name in names]
    groups = ColumnGroups(
        isp=[h for h in headers if _has_marker(h, ISP_MARKER)],
        tc=[h for h in headers if _has_marker(h, TC_MARKER)],
    )
    if not groups.isp or not groups.tc:
        raise MissingColumnsError(
            'No ISP or Tc columns found. Make sure headers include "ISP" and "Tc".',
            {"isp": groups.isp, "tc": groups.tc},
        )
    return groups


# ── Pressure extraction ─────────────────────────────────────────


def extract_pressure(header: str) -> float:
    """Return the first numeric token in *header* (``"ISP_300psi"`` -> 300.0)."""
    match = _PRESSURE_TOKEN_RE.search(header)
    if match is None:
        raise HeaderParseError(header)
    try:
        return float(match.group(0))
    except ValueError as exc:
        raise HeaderParseError(header) from exc


def extract_pressures(headers: Sequence[str]) -> list[float]:
    """Parallel list of pressures for *headers*; duplicates are kept."""
    return [extract_pressure(h) for h in headers]


# ── Reconciliation steps ────────────────────────────────────────


def _check_repeats(
    pc_isp: Sequence[float], pc_tc: Sequence[float], values: Iterable[float]
) -> None:
    isp_counts, tc_counts = Counter(pc_isp), Counter(pc_tc)
    uneven = sorted(v for v in set(values) if isp_counts[v] != tc_counts[v])
    if uneven:
        raise ShapeMismatchError(
            "ISP and Tc headers repeat pressures a different number of times "
            f"{_fmt_values(uneven)}: ISP {_fmt_values(pc_isp)}, Tc {_fmt_values(pc_tc)}"
        )


def align_pressures(pc_isp: Sequence[float], pc_tc: Sequence[float]) -> PressureAlignment:
    """Pick a single pressure axis and the matrix columns that follow it.

    Equal sets keep the ISP order and reorder Tc columns to match it. Differing
    sets fall back to their intersection, sorted ascending. A kept pressure
    must repeat as often in both groups.
    """
    if set(pc_isp) == set(pc_tc):
        _check_repeats(pc_isp, pc_tc, set(pc_isp))
        tc_slots: dict[float, list[int]] = {}
        for k, value in enumerate(pc_tc):
            tc_slots.setdefault(value, []).append(k)
        return PressureAlignment(
            pc=list(pc_isp),
            isp_index=list(range(len(pc_isp))),
            tc_index=[tc_slots[value].pop(0) for value in pc_isp],
            mismatch=False,
        )

    common = sorted(set(pc_isp) & set(pc_tc))
    if not common:
        raise MissingColumnsError(
            "ISP and Tc headers share no pressure values: "
            f"ISP {_fmt_values(pc_isp)}, Tc {_fmt_values(pc_tc)}"
        )
    _check_repeats(pc_isp, pc_tc, common)
    return PressureAlignment(
        pc=[v for p in common for v in pc_isp if v == p],
        isp_index=[k for p in common for k, v in enumerate(pc_isp) if v == p],
        tc_index=[k for p in common for k, v in enumerate(pc_tc) if v == p],
        mismatch=True,
    )


def orient_matrix(matrix: np.ndarray, n_of: int, n_pc: int, name: str = "data") -> np.ndarray:
    """Return *matrix* shaped ``(n_of, n_pc)``, transposing it at most once.

    Raises
    ------
    ShapeMismatchError
        If neither the matrix nor its transpose has the expected shape.
    """
    matrix = np.asarray(matrix, dtype=float)
    if matrix.ndim != 2:
        raise ShapeMismatchError(f"{name} matrix must be 2-D, got {matrix.ndim}-D")
    if matrix.shape == (n_of, n_pc):
        return matrix
    if matrix.shape == (n_pc, n_of):
        return matrix.T.copy()
    raise ShapeMismatchError(
        f"{name} matrix has shape {matrix.shape}; expected {(n_of, n_pc)} "
        f"for {n_of} O/F values and {n_pc} chamber pressures"
    )


def _coerce_numeric(s: pd.Series, column: str) -> np.ndarray:
    cleaned = s.astype("string").str.strip().replace("", pd.NA)
    parsed = pd.to_numeric(cleaned, errors="coerce")
    bad = parsed.isna().to_numpy()
    if bad.any():
        rows = [str(i + 1) for i in np.flatnonzero(bad)[:_MAX_BAD_ROWS_LISTED]]
        more = int(bad.sum()) - len(rows)
        listed = ", ".join(rows) + (f" (+{more} more)" if more > 0 else "")
        raise NonNumericDataError(
            f"Column {column!r} has missing or non-numeric values in data row(s) {listed}",
            {"column": column, "rows": int(bad.sum())},
        )
    return parsed.to_numpy(dtype=float)


def _prepare_table(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = pd.Index([str(c) for c in df.columns])
    if df.empty:
        return df
    as_text = df.astype("string").apply(lambda s: s.str.strip())
    blank = as_text.fillna("").eq("")
    return df.loc[~blank.all(axis=1)].reset_index(drop=True)


def _within_tolerance(value: float, candidates: Sequence[float]) -> bool:
    if isinstance(candidates, RangeSpec):
        return value in candidates
    return any(np.isclose(value, c, rtol=1e-9, atol=1e-9) for c in candidates)


def _fmt_request(values: Sequence[float]) -> str:
    return str(values) if isinstance(values, RangeSpec) else _fmt_values(values)


# ── Main reconciliation function ────────────────────────────────


def reconcile(
    df: pd.DataFrame,
    of_values: Sequence[float] | None = None,
    pc_input: Sequence[float] | None = None,
) -> tuple[ReconciledDataset, ReconcileReport]:
    """Turn a raw table into a chart-ready dataset.

    The first column holds O/F ratios; ISP and Tc columns are located by
    header marker and keyed by the pressure in their names. Without
    *of_values* the file's own O/F column is used as the axis. Returns
    ``(dataset, report)``; fatal problems raise a CarpetPlotError subclass.
    """
    report = ReconcileReport(rows_in=len(df), rows_out=len(df))

    # 1. Drop blank rows
    table = _prepare_table(df)
    report.rows_out = len(table)
    if table.empty or len(table.columns) == 0:
        raise ShapeMismatchError("Input table has no data rows")

    # 2. Classify + extract
    groups = classify_columns(table.columns)
    pc_isp = extract_pressures(groups.isp)
    pc_tc = extract_pressures(groups.tc)

    # 3. Pressure alignment
    alignment = align_pressures(pc_isp, pc_tc)
    if alignment.mismatch:
        message = (
            "Pressure headers differ between ISP and Tc columns "
            f"(ISP {_fmt_values(pc_isp)}, Tc {_fmt_values(pc_tc)}); "
            f"using intersection of both sets: {_fmt_values(alignment.pc)}"
        )
        warnings.warn(message, PressureMismatchWarning, stacklevel=2)
        report.warnings.append(message)

    isp_columns = [groups.isp[k] for k in alignment.isp_index]
    tc_columns = [groups.tc[k] for k in alignment.tc_index]
    isp = np.column_stack([_coerce_numeric(table[c], c) for c in isp_columns])
    tc = np.column_stack([_coerce_numeric(table[c], c) for c in tc_columns])

    # 4. O/F alignment: the file wins on length
    of_column = str(table.columns[0])
    file_of = _coerce_numeric(table[of_column], of_column)
    # Lengths are compared before a requested range is expanded.
    if of_values is None:
        of = file_of
    elif len(of_values) != len(file_of):
        message = (
            f"File O/F values differ from input range ({len(of_values)} requested, "
            f"{len(file_of)} in file). Using values from the file."
        )
        warnings.warn(message, RowCountMismatchNotice, stacklevel=2)
        report.notices.append(message)
        of = file_of
    else:
        of = np.asarray(list(of_values), dtype=float)

    # 5. Orientation: rows = O/F, columns = Pc
    n_of, n_pc = len(of), len(alignment.pc)
    isp = orient_matrix(isp, n_of, n_pc, "Isp")
    tc = orient_matrix(tc, n_of, n_pc, "Tc")

    # 6. Advisory Pc range check
    if pc_input is not None and len(pc_input) > 0:
        outside = [p for p in alignment.pc if not _within_tolerance(p, pc_input)]
        if outside:
            report.notices.append(
                f"File pressures {_fmt_values(outside)} are outside the requested "
                f"Pc range {_fmt_request(pc_input)}; plotting pressures from the file."
            )

    dataset = ReconciledDataset(
        of=of,
        pc=np.asarray(alignment.pc, dtype=float),
        isp=isp,
        tc=tc,
        isp_columns=isp_columns,
        tc_columns=tc_columns,
    )
    return dataset, report
