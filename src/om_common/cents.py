"""Integer arithmetic utilities for cents-based offer amounts.

All prices and offer amounts use int (cents). No float, no Decimal.
Ratios are expressed in basis points (10000 bps == 100%).
"""

BPS_DENOMINATOR = 10_000


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def min_amount_for_floor(listing_price: int, floor_bps: int) -> int:
    """Smallest whole-cent amount satisfying amount >= listing_price * floor_bps / 10000.

    Ceiling division so a fractional floor rounds up (the floor is never undercut):
    9999 cents at 5000 bps -> 5000, not 4999.
    """
    if floor_bps <= 0:
        return 1
    return (listing_price * floor_bps + BPS_DENOMINATOR - 1) // BPS_DENOMINATOR


def meets_floor(amount: int, listing_price: int, floor_bps: int) -> bool:
    """Exact integer comparison: amount * 10000 >= listing_price * floor_bps."""
    return amount * BPS_DENOMINATOR >= listing_price * floor_bps
