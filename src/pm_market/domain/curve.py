"""Linear bonding curve on combined long+short supply.

price(x) = curve_a + curve_b * x / SCALE

Minting `tokens` at current supply `s` costs the exact integral of price(x)
from s to s + tokens, evaluated in 1e18 fixed point with floor division:

    cost = curve_a * tokens / SCALE
         + curve_b * (s * tokens + tokens**2 / 2) / SCALE**2

Both sides share one curve: buying either side raises the price of both.
"""

from src.pm_common.fixed_point import SCALE


def _check_non_negative(**values: int) -> None:
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")


def mint_cost(supply: int, tokens: int, curve_a: int, curve_b: int) -> int:
    """Collateral needed to mint `tokens` more when combined supply is `supply`."""
    _check_non_negative(supply=supply, tokens=tokens, curve_a=curve_a, curve_b=curve_b)
    if tokens == 0:
        return 0
    linear = curve_a * tokens // SCALE
    quadratic = curve_b * (supply * tokens + tokens * tokens // 2) // (SCALE * SCALE)
    return linear + quadratic


def spot_price(supply: int, curve_a: int, curve_b: int) -> int:
    """Price of the next unit at combined `supply`."""
    _check_non_negative(supply=supply, curve_a=curve_a, curve_b=curve_b)
    return curve_a + curve_b * supply // SCALE
