"""Fixed-point integer arithmetic for collateral, token amounts and scores.

All amounts are plain ints scaled by SCALE (1e18). No float, no Decimal.
Python ints are unbounded, so intermediate products never overflow before
the final division.
"""

SCALE = 10**18


def to_fixed(value: int | str) -> int:
    """Parse a whole number or decimal string into a 1e18-scaled int.

    to_fixed(100) -> 100 * 10**18, to_fixed("0.8") -> 8 * 10**17.
    Digits beyond 18 decimal places raise ValueError.
    """
    if isinstance(value, int):
        return value * SCALE
    text = value.strip()
    negative = text.startswith("-")
    if negative:
        text = text[1:]
    whole, _, frac = text.partition(".")
    if not (whole or frac) or not (whole + frac).isdigit():
        raise ValueError(f"Not a decimal number: {value!r}")
    if len(frac) > 18:
        raise ValueError(f"More than 18 decimal places: {value!r}")
    scaled = int(whole or "0") * SCALE + int(frac.ljust(18, "0") or "0")
    return -scaled if negative else scaled


def mul_div(a: int, b: int, denominator: int) -> int:
    """Floor of a * b / denominator for non-negative operands."""
    if denominator <= 0:
        raise ValueError(f"Denominator must be positive, got {denominator}")
    return a * b // denominator


def fixed_to_display(amount: int, places: int = 6) -> str:
    """Render a scaled amount as a decimal string: 1500000000000000000 -> '1.500000'."""
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    whole, frac = divmod(amount, SCALE)
    if places <= 0:
        return f"{sign}{whole:,}"
    frac_str = f"{frac:018d}"[:places]
    return f"{sign}{whole:,}.{frac_str}"
