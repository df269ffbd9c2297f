"""Range collection — turn min/max/step prompts into numeric sequences."""

from __future__ import annotations

import math
from collections.abc import Callable

from carpet_plot.errors import InputError
from carpet_plot.models import RangeSpec

Ask = Callable[[str], str]
OnRetry = Callable[[InputError], None]

DEFAULT_RETRIES = 3


def parse_number(text: object, label: str) -> float:
    """Parse a free-form numeric entry.

    Raises
    ------
    InputError
        If *text* is blank, not a number, or not finite.
    """
    raw = str(text).strip() if text is not None else ""
    if not raw:
        raise InputError(f"{label}: a number is required", {"label": label, "value": raw})
    try:
        value = float(raw)
    except ValueError as exc:
        raise InputError(
            f"{label}: {raw!r} is not a number", {"label": label, "value": raw}
        ) from exc
    if not math.isfinite(value):
        raise InputError(f"{label}: {raw!r} is not finite", {"label": label, "value": raw})
    return value


def _ask_number(ask: Ask, label: str, *, retries: int, on_retry: OnRetry | None) -> float:
    attempt = 0
    while True:
        try:
            return parse_number(ask(label), label)
        except InputError as exc:
            attempt += 1
            if attempt >= retries:
                raise
            if on_retry is not None:
                on_retry(exc)


def collect_range(
    ask: Ask,
    axis: str,
    *,
    unit: str = "",
    retries: int = DEFAULT_RETRIES,
    on_retry: OnRetry | None = None,
) -> RangeSpec:
    """Ask for minimum, maximum and increment of *axis* and build a RangeSpec.

    A malformed entry is re-asked up to *retries* times before the
    :class:`InputError` propagates. A non-positive increment is re-asked the
    same way.
    """
    suffix = f" ({unit})" if unit else ""
    minimum = _ask_number(ask, f"Enter minimum {axis}{suffix}", retries=retries, on_retry=on_retry)
    maximum = _ask_number(ask, f"Enter maximum {axis}{suffix}", retries=retries, on_retry=on_retry)

    attempt = 0
    while True:
        step = _ask_number(ask, f"Enter {axis} increment{suffix}", retries=retries, on_retry=on_retry)
        try:
            return RangeSpec(minimum, maximum, step)
        except InputError as exc:
            attempt += 1
            if attempt >= retries:
                raise
            if on_retry is not None:
                on_retry(exc)


def collect_ranges(
    ask: Ask,
    *,
    retries: int = DEFAULT_RETRIES,
    on_retry: OnRetry | None = None,
) -> tuple[RangeSpec, RangeSpec]:
    """Prompt for the O/F range, then the chamber-pressure range."""
    of_range = collect_range(ask, "O/F ratio", retries=retries, on_retry=on_retry)
    pc_range = collect_range(ask, "chamber pressure", unit="psi", retries=retries, on_retry=on_retry)
    return of_range, pc_range
