from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pandas as pd  # noqa: E402
import pytest  # noqa: E402
from matplotlib import pyplot as plt  # noqa: E402


@pytest.fixture(autouse=True)
def _close_figures() -> Iterator[None]:
    yield
    plt.close("all")


@pytest.fixture
def carpet_table() -> pd.DataFrame:
    """Three O/F rows, two pressures, as the loader returns them (strings)."""
    return pd.DataFrame(
        {
            "OF": ["1.0", "1.5", "2.0"],
            "ISP_100psi": ["250", "260", "255"],
            "ISP_200psi": ["265", "275", "270"],
            "Tc_100psi": ["2900", "3100", "3000"],
            "Tc_200psi": ["2950", "3150", "3050"],
        },
        dtype="string",
    )


@pytest.fixture
def carpet_csv(tmp_path: Path) -> Path:
    path = tmp_path / "carpet.csv"
    path.write_text(
        "OF,ISP_100psi,ISP_200psi,Tc_100psi,Tc_200psi\n"
        "1.0,250,265,2900,2950\n"
        "1.5,260,275,3100,3150\n"
        "2.0,255,270,3000,3050\n",
        encoding="utf-8",
    )
    return path
