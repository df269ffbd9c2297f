"""I/O helpers — pick and load the performance table."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Callable, Literal, cast

import pandas as pd

from carpet_plot import SUPPORTED_SUFFIXES
from carpet_plot.errors import FileSelectionError

FILE_TYPES: list[tuple[str, str]] = [
    ("Spreadsheet or CSV", " ".join(f"*{suffix}" for suffix in SUPPORTED_SUFFIXES)),
    ("Excel workbook", "*.xlsx *.xls"),
    ("CSV file", "*.csv"),
]

# ── Selection ────────────────────────────────────────────────────


def select_input_file(title: str = "Select Excel Data File") -> Path:
    """Open a native file picker and return the chosen path.

    Raises
    ------
    FileSelectionError
        If the user cancels the dialog.
    """
    import tkinter as tk
    from tkinter import filedialog

    root = tk.Tk()
    root.withdraw()
    try:
        chosen = filedialog.askopenfilename(title=title, filetypes=FILE_TYPES)
    finally:
        root.destroy()

    if not chosen:
        raise FileSelectionError("No file selected. Exiting...")
    return Path(chosen)


# ── Loading ──────────────────────────────────────────────────────

_EXCEL_ENGINES: dict[str, str] = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xltx": "openpyxl",
    ".xltm": "openpyxl",
    ".xls": "xlrd",
}


def _header_names(cells: Iterable[object]) -> list[str]:
    """Column names taken from the header row.

    A blank cell becomes ``VarN`` (N = 1-based position). A repeated name gets
    ``_1``, ``_2``, ... appended, so ``ISP100`` twice gives ``ISP100`` and
    ``ISP100_1`` and the pressure stays the first numeric token of both.
    """
    names: list[str] = []
    taken: set[str] = set()
    for position, cell in enumerate(cells, start=1):
        base = "" if pd.isna(cell) else str(cell).strip()
        base = base or f"Var{position}"
        name, n = base, 0
        while name in taken:
            n += 1
            name = f"{base}_{n}"
        taken.add(name)
        names.append(name)
    return names


def _split_header_row(raw: pd.DataFrame) -> pd.DataFrame:
    if raw.empty:
        return pd.DataFrame(dtype="string")
    body = raw.iloc[1:].reset_index(drop=True)
    body.columns = pd.Index(_header_names(raw.iloc[0].tolist()))
    return body


def _read_csv_rows(path: Path, delimiter: str | None) -> pd.DataFrame:
    last_exc: Exception | None = None
    engine: Literal["c", "python"] = "c" if delimiter else "python"
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            return pd.read_csv(
                path,
                header=None,
                dtype="string",
                sep=delimiter or None,
                engine=engine,
                encoding=encoding,
                encoding_errors="strict",
                skip_blank_lines=True,
            )
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
    raise ValueError(f"Could not read CSV {path} (decode or parse failed)") from last_exc


def _read_sheet_rows(path: Path, engine: str) -> pd.DataFrame:
    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    try:
        return read_excel(path, sheet_name=0, header=None, engine=engine, dtype="string")
    except ImportError as exc:
        if engine != "xlrd":
            raise
        raise ValueError(
            "Unsupported .xls input unless 'xlrd' is installed. "
            "Either convert to .xlsx or add dependency: pip install xlrd"
        ) from exc


def load_table(path: Path, delimiter: str | None = None) -> pd.DataFrame:
    """Load a CSV or Excel file and return a raw DataFrame of strings.

    Only the first sheet of a workbook is read. The first row supplies the
    column names (see ``_header_names`` for blanks and repeats).

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If *path* is a directory, the extension is not supported, or CSV
        decoding/parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise ValueError(f"Input path is a directory, not a file: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _split_header_row(_read_csv_rows(path, delimiter))
    if suffix in _EXCEL_ENGINES:
        return _split_header_row(_read_sheet_rows(path, _EXCEL_ENGINES[suffix]))

    raise ValueError(
        f"Unsupported file type: {suffix!r}. Use {', '.join(SUPPORTED_SUFFIXES)}"
    )
