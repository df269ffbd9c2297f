"""CLI entry point for carpet-plot."""

from __future__ import annotations

import warnings
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import pandas as pd
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

from carpet_plot import __version__
from carpet_plot.errors import CarpetPlotError, CarpetPlotWarning, InputError
from carpet_plot.io import load_table, select_input_file
from carpet_plot.models import ReconciledDataset, ReconcileReport, RunContext
from carpet_plot.pipeline import reconcile
from carpet_plot.plotting import render_carpet, save_figure, show
from carpet_plot.ranges import collect_ranges

app = typer.Typer(
    name="carpet-plot",
    help="carpet-plot — Isp vs Tc carpet plots from combustion performance tables.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {escape(msg)}")


def _warn(msg: str) -> None:
    console.print(f"  [yellow]![/yellow] {escape(msg)}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"carpet-plot v{__version__}")
        raise typer.Exit()


def _ask(label: str) -> str:
    try:
        return console.input(f"{label}: ")
    except EOFError as exc:
        raise InputError(f"{label}: no input received") from exc


def _on_retry(exc: InputError) -> None:
    _warn(f"{exc}; please try again")


def _reconcile_quietly(
    raw_df: pd.DataFrame,
    of_values: Sequence[float] | None,
    pc_values: Sequence[float] | None,
) -> tuple[ReconciledDataset, ReconcileReport]:
    # Diagnostics are printed from the report instead.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", CarpetPlotWarning)
        return reconcile(raw_df, of_values, pc_values)


def _print_diagnostics(report: ReconcileReport) -> None:
    for w in report.warnings:
        _warn(w)
    for n in report.notices:
        _warn(n)


def _fmt_axis(values: Iterable[float]) -> str:
    return ", ".join(f"{v:g}" for v in values)


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """carpet-plot CLI."""


# ── run command ──────────────────────────────────────────────────


@app.command()
def run(
    input_file: Path | None = typer.Option(
        None, "--input", "-i",
        help="CSV or Excel file with O/F, ISP and Tc columns. Opens a file picker when omitted.",
        exists=True, readable=True, dir_okay=False,
    ),
    save: Path | None = typer.Option(
        None, "--save", "-s",
        help="Also export the figure to this path (format from suffix, e.g. .png or .pdf).",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; warnings and errors still print.",
    ),
) -> None:
    """Prompt for O/F and Pc ranges, load a table and show the carpet plot."""
    ctx = RunContext(input_path=input_file, quiet=quiet)
    echo = _printer(ctx.quiet)

    echo(Panel(
        f"[bold]carpet-plot[/bold] v{__version__}\n"
        "Combustion Chamber Carpet Plot Generator",
        title="Carpet Plot", border_style="blue",
    ))

    try:
        # ── Ranges ───────────────────────────────────────────────
        ctx.of_range, ctx.pc_range = collect_ranges(_ask, on_retry=_on_retry)
        of_r, pc_r = ctx.of_range, ctx.pc_range
        echo(
            f"  O/F range: {of_r.minimum:.2f} - {of_r.maximum:.2f} "
            f"(step {of_r.step:.2f}), {len(of_r)} values"
        )
        echo(
            f"  Pc range: {pc_r.minimum:.2f} - {pc_r.maximum:.2f} psi "
            f"(step {pc_r.step:.2f}), {len(pc_r)} values"
        )

        # ── Select + load ────────────────────────────────────────
        if ctx.input_path is None:
            echo("[blue]>[/blue] Please select the Excel file containing your Isp and Tc data.")
            ctx.input_path = select_input_file()
        echo(f"[blue]>[/blue] Loading {escape(str(ctx.input_path))} …")
        raw_df = load_table(ctx.input_path)
        echo(f"  Detected {len(raw_df)} O/F ratio entries from file.")

        # ── Reconcile ────────────────────────────────────────────
        dataset, report = _reconcile_quietly(raw_df, ctx.of_values, ctx.pc_values)
        _print_diagnostics(report)
        n_of, n_pc = dataset.shape
        echo(
            f"  [green]OK[/green] Loaded data for {n_of} O/F ratios "
            f"and {n_pc} chamber pressures."
        )

        # ── Plot ─────────────────────────────────────────────────
        echo("[blue]>[/blue] Drawing carpet plot …")
        fig = render_carpet(dataset)
        if save is not None:
            saved = save_figure(fig, save)
            echo(f"  Figure -> {escape(str(saved))}")
    except CarpetPlotError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    except typer.Exit:
        raise
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    echo(Panel(
        "[green]Done[/green] — carpet plot generated successfully",
        title="Carpet Plot Complete", border_style="green",
    ))
    show()


# ── validate command ─────────────────────────────────────────────


@app.command()
def validate(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="CSV or Excel file with O/F, ISP and Tc columns.",
        exists=True, readable=True, dir_okay=False,
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress the summary table; warnings and errors still print.",
    ),
) -> None:
    """Check that a file can be plotted, without prompting or plotting.

    The file's own O/F column is used as the axis.
    Exit 0 = OK, exit 2 = the file cannot be plotted.
    """
    try:
        raw_df = load_table(input_file)
        dataset, report = _reconcile_quietly(raw_df, None, None)
    except CarpetPlotError as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    _print_diagnostics(report)
    if quiet:
        return

    tbl = RichTable(title="Validation Summary", show_lines=True)
    tbl.add_column("Check", style="bold")
    tbl.add_column("Result")

    tbl.add_row("Input", escape(str(input_file)))
    tbl.add_row("Rows in", str(report.rows_in))
    tbl.add_row("Rows used", str(report.rows_out))
    tbl.add_row("ISP columns", escape(", ".join(dataset.isp_columns)))
    tbl.add_row("Tc columns", escape(", ".join(dataset.tc_columns)))
    tbl.add_row("Pc (psi)", _fmt_axis(dataset.pc))
    tbl.add_row("O/F", _fmt_axis(dataset.of))
    for w in report.warnings:
        tbl.add_row("Warning", f"[yellow]{escape(w)}[/yellow]")
    for n in report.notices:
        tbl.add_row("Notice", f"[yellow]{escape(n)}[/yellow]")
    tbl.add_row("Status", "[green]PASS[/green]")
    console.print(tbl)
