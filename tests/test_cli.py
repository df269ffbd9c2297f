"""CLI integration tests for carpet-plot."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

import carpet_plot.cli as cli_mod
from carpet_plot import __version__
from carpet_plot.cli import app
from carpet_plot.errors import FileSelectionError

runner = CliRunner()

RANGES_MATCHING = "1.0\n2.0\n0.5\n100\n200\n100\n"


@pytest.fixture
def shown(monkeypatch: pytest.MonkeyPatch) -> list[bool]:
    calls: list[bool] = []
    monkeypatch.setattr(cli_mod, "show", lambda: calls.append(True))
    return calls


def _write_csv(tmp_path: Path, name: str, rows: str) -> Path:
    path = tmp_path / name
    path.write_text(rows, encoding="utf-8")
    return path


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_run_success_shows_plot(carpet_csv: Path, shown: list[bool]) -> None:
    result = runner.invoke(app, ["run", "--input", str(carpet_csv)], input=RANGES_MATCHING)

    assert result.exit_code == 0, result.stdout
    assert "Enter minimum O/F ratio" in result.stdout
    assert "3 O/F ratios" in result.stdout
    assert "2 chamber pressures" in result.stdout
    assert "Carpet Plot Complete" in result.stdout
    assert shown == [True]


def test_run_quiet_still_shows_plot(carpet_csv: Path, shown: list[bool]) -> None:
    result = runner.invoke(
        app, ["run", "--input", str(carpet_csv), "--quiet"], input=RANGES_MATCHING
    )

    assert result.exit_code == 0
    assert "Carpet Plot Complete" not in result.stdout
    assert shown == [True]


def test_run_saves_figure(carpet_csv: Path, tmp_path: Path, shown: list[bool]) -> None:
    out = tmp_path / "figs" / "carpet.png"

    result = runner.invoke(
        app,
        ["run", "--input", str(carpet_csv), "--save", str(out), "--quiet"],
        input=RANGES_MATCHING,
    )

    assert result.exit_code == 0
    assert out.exists()


def test_run_reprompts_on_bad_number(carpet_csv: Path, shown: list[bool]) -> None:
    result = runner.invoke(
        app, ["run", "--input", str(carpet_csv)], input="abc\n" + RANGES_MATCHING
    )

    assert result.exit_code == 0
    assert "not a number" in result.stdout
    assert shown == [True]


def test_run_row_count_mismatch_prints_notice(carpet_csv: Path, shown: list[bool]) -> None:
    result = runner.invoke(
        app, ["run", "--input", str(carpet_csv), "--quiet"], input="1.0\n3.0\n0.5\n100\n200\n100\n"
    )

    assert result.exit_code == 0
    assert "differ from input range" in result.stdout
    assert shown == [True]


def test_run_pressure_mismatch_prints_warning(tmp_path: Path, shown: list[bool]) -> None:
    csv_path = _write_csv(
        tmp_path,
        "partial.csv",
        "OF,ISP300,ISP450,TC300\n1.0,280,290,3200\n1.5,285,295,3300\n2.0,283,293,3250\n",
    )

    result = runner.invoke(
        app, ["run", "--input", str(csv_path), "--quiet"], input="1.0\n2.0\n0.5\n300\n450\n150\n"
    )

    assert result.exit_code == 0
    assert "intersection" in result.stdout
    assert shown == [True]


def test_run_missing_columns_exits_2_without_plot(tmp_path: Path, shown: list[bool]) -> None:
    csv_path = _write_csv(tmp_path, "bad.csv", "OF,thrust_100\n1.0,5\n1.5,6\n2.0,7\n")

    result = runner.invoke(app, ["run", "--input", str(csv_path)], input=RANGES_MATCHING)

    assert result.exit_code == 2
    assert "No ISP or Tc columns" in result.stdout
    assert shown == []


def test_run_header_parse_error_exits_2(tmp_path: Path, shown: list[bool]) -> None:
    csv_path = _write_csv(tmp_path, "bad.csv", "OF,ISP_max,Tc_100\n1.0,250,2900\n")

    result = runner.invoke(app, ["run", "--input", str(csv_path)], input=RANGES_MATCHING)

    assert result.exit_code == 2
    assert "ISP_max" in result.stdout
    assert shown == []


def test_run_cancelled_picker_exits_2(monkeypatch: pytest.MonkeyPatch, shown: list[bool]) -> None:
    def _cancel() -> Path:
        raise FileSelectionError("No file selected. Exiting...")

    monkeypatch.setattr(cli_mod, "select_input_file", _cancel)

    result = runner.invoke(app, ["run"], input=RANGES_MATCHING)

    assert result.exit_code == 2
    assert "No file selected" in result.stdout
    assert shown == []


def test_run_uses_picker_when_no_input(
    monkeypatch: pytest.MonkeyPatch, carpet_csv: Path, shown: list[bool]
) -> None:
    monkeypatch.setattr(cli_mod, "select_input_file", lambda: carpet_csv)

    result = runner.invoke(app, ["run", "--quiet"], input=RANGES_MATCHING)

    assert result.exit_code == 0
    assert shown == [True]


def test_run_exhausted_input_exits_2(carpet_csv: Path, shown: list[bool]) -> None:
    result = runner.invoke(app, ["run", "--input", str(carpet_csv)], input="1.0\n")

    assert result.exit_code == 2
    assert "no input received" in result.stdout
    assert shown == []


def test_run_unexpected_error_exits_1(
    monkeypatch: pytest.MonkeyPatch, carpet_csv: Path, shown: list[bool]
) -> None:
    def _boom(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(cli_mod, "render_carpet", _boom)

    result = runner.invoke(app, ["run", "--input", str(carpet_csv)], input=RANGES_MATCHING)

    assert result.exit_code == 1
    assert "Unexpected internal error" in result.stdout
    assert shown == []


def test_validate_pass_prints_summary(carpet_csv: Path) -> None:
    result = runner.invoke(app, ["validate", "--input", str(carpet_csv)])

    assert result.exit_code == 0
    assert "Validation Summary" in result.stdout
    assert "PASS" in result.stdout
    assert "ISP_100psi" in result.stdout


def test_validate_quiet_prints_nothing_on_clean_file(carpet_csv: Path) -> None:
    result = runner.invoke(app, ["validate", "--input", str(carpet_csv), "--quiet"])

    assert result.exit_code == 0
    assert result.stdout.strip() == ""


def test_validate_non_numeric_cell_exits_2(tmp_path: Path) -> None:
    csv_path = _write_csv(
        tmp_path, "holes.csv", "OF,ISP_100,Tc_100\n1.0,250,2900\n1.5,oops,3000\n"
    )

    result = runner.invoke(app, ["validate", "--input", str(csv_path)])

    assert result.exit_code == 2
    assert "non-numeric" in result.stdout


def test_validate_unsupported_file_exits_2(tmp_path: Path) -> None:
    path = tmp_path / "data.txt"
    path.write_text("OF,ISP_100,Tc_100\n", encoding="utf-8")

    result = runner.invoke(app, ["validate", "--input", str(path)])

    assert result.exit_code == 2
    assert "Unsupported file type" in result.stdout
