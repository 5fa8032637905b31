"""Kubernetes resource quantities (``"500m"``, ``"2"``, ``"1Gi"``, ``"1e3"``)."""

from __future__ import annotations

import re
from decimal import ROUND_CEILING, Decimal, InvalidOperation

_QUANTITY_RE = re.compile(
    r"^(?P<number>[+-]?(?:\d+\.?\d*|\.\d+))"
    r"(?P<suffix>Ki|Mi|Gi|Ti|Pi|Ei|[eE][+-]?\d+|[numkMGTPE])?$"
)

_BINARY = {
    "Ki": Decimal(2) ** 10,
    "Mi": Decimal(2) ** 20,
    "Gi": Decimal(2) ** 30,
    "Ti": Decimal(2) ** 40,
    "Pi": Decimal(2) ** 50,
    "Ei": Decimal(2) ** 60,
}

_DECIMAL = {
    "n": Decimal("1e-9"),
    "u": Decimal("1e-6"),
    "m": Decimal("1e-3"),
    "k": Decimal("1e3"),
    "M": Decimal("1e6"),
    "G": Decimal("1e9"),
    "T": Decimal("1e12"),
    "P": Decimal("1e15"),
    "E": Decimal("1e18"),
}

# Anything above 1e30 base units is rejected as out of range.
_MAX_ADJUSTED_EXPONENT = 30


def parse_quantity(value: str | int | float) -> Decimal:
    """Parse a quantity into its base-unit value.

    Raises:
        ValueError: If *value* is not a valid quantity.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid quantity: {value!r}")
    if isinstance(value, (int, float)):
        return _checked(Decimal(str(value)), value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid quantity: {value!r}")

    match = _QUANTITY_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid quantity: {value!r}")

    try:
        number = Decimal(match.group("number"))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid quantity: {value!r}") from exc

    suffix = match.group("suffix")
    try:
        if not suffix:
            result = number
        elif suffix in _BINARY:
            result = number * _BINARY[suffix]
        elif suffix in _DECIMAL:
            result = number * _DECIMAL[suffix]
        else:
            # decimal exponent, e.g. "1e3"
            result = number.scaleb(int(suffix[1:]))
    except ArithmeticError as exc:
        raise ValueError(f"Quantity out of range: {value!r}") from exc
    return _checked(result, value)


def _checked(number: Decimal, value: object) -> Decimal:
    if not number.is_finite():
        raise ValueError(f"Invalid quantity: {value!r}")
    if number and number.adjusted() > _MAX_ADJUSTED_EXPONENT:
        raise ValueError(f"Quantity out of range: {value!r}")
    return number


def to_millis(value: str | int | float) -> int:
    """Return the quantity in thousandths, rounded up (``"1.5"`` -> 1500)."""
    millis = parse_quantity(value) * 1000
    return int(millis.to_integral_value(rounding=ROUND_CEILING))
