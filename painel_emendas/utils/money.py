"""Decimal helpers for monetary values (Brazilian reais)."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0.00")
_CENTAVOS = Decimal("0.01")


def to_decimal(value: object) -> Decimal:
    """Convert a float/int/str/Decimal/None to a 2-place Decimal.

    Floats go through ``str`` first so that ``0.1`` becomes ``Decimal("0.10")``
    instead of its binary expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value.quantize(_CENTAVOS, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(_CENTAVOS, rounding=ROUND_HALF_UP)


def somar(valores: Iterable[object]) -> Decimal:
    total = ZERO
    for valor in valores:
        total += to_decimal(valor)
    return total


def format_brl(value: object) -> str:
    """Format a value as ``R$ 1.234,56``."""
    texto = f"{to_decimal(value):,.2f}"
    # swap US separators for Brazilian ones
    texto = texto.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {texto}"


def safe_pct(numerator: object, denominator: object) -> float:
    """Return numerator / denominator × 100 rounded to 2 dp; 0.0 when denominator is zero."""
    den = to_decimal(denominator)
    if den == 0:
        return 0.0
    return round(float(to_decimal(numerator) / den * 100), 2)
