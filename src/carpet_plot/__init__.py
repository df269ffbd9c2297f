"""carpet-plot — Isp vs Tc carpet plots from combustion performance tables."""

__version__ = "0.1.0"

ISP_MARKER: str = "ISP"
TC_MARKER: str = "Tc"

SUPPORTED_SUFFIXES: tuple[str, ...] = (".csv", ".xlsx", ".xlsm", ".xltx", ".xltm", ".xls")
