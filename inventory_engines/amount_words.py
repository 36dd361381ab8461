"""
Amount-in-Words Engine - Indian numbering for printed invoices.

    render_amount_in_words(1234567)
        -> "Twelve Lakh Thirty Four Thousand Five Hundred Sixty Seven"

Amounts are reduced largest group first over a fixed table (crore, lakh,
thousand, hundred).  A group count that itself reaches a hundred or more
(amounts of a hundred crore and above) is rendered through the same table,
so 1_000_000_000 reads "One Hundred Crore".  The reduction is iterative: a
work stack replaces recursion.

Paise are out of scope here; callers format them separately.
"""

from __future__ import annotations

from decimal import Decimal

from inventory_kernel.db.types import round_money, to_decimal

ONES = (
    "",
    "One",
    "Two",
    "Three",
    "Four",
    "Five",
    "Six",
    "Seven",
    "Eight",
    "Nine",
    "Ten",
    "Eleven",
    "Twelve",
    "Thirteen",
    "Fourteen",
    "Fifteen",
    "Sixteen",
    "Seventeen",
    "Eighteen",
    "Nineteen",
)

TENS = (
    "",
    "",
    "Twenty",
    "Thirty",
    "Forty",
    "Fifty",
    "Sixty",
    "Seventy",
    "Eighty",
    "Ninety",
)

GROUPS = (
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
    (100, "Hundred"),
)


def _below_hundred(n: int) -> list[str]:
    if n < 20:
        return [ONES[n]] if n else []
    words = [TENS[n // 10]]
    if n % 10:
        words.append(ONES[n % 10])
    return words


def render_amount_in_words(amount: int) -> str:
    """
    Render a non-negative integer in Indian-numbering English words.

    Raises:
        ValueError: negative values, booleans and non-integers.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be a non-negative integer, got {amount!r}")
    if amount < 0:
        raise ValueError(f"Amount must be a non-negative integer, got {amount}")
    if amount == 0:
        return "Zero"

    words: list[str] = []
    # Work stack of numbers still to render and group names to emit;
    # popped from the end, so parts are pushed in reverse
    stack: list[int | str] = [amount]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            words.append(item)
            continue
        if item < 100:
            words.extend(_below_hundred(item))
            continue
        parts: list[int | str] = []
        remaining = item
        for magnitude, name in GROUPS:
            count, remaining = divmod(remaining, magnitude)
            if count:
                parts.extend((count, name))
        if remaining:
            parts.append(remaining)
        stack.extend(reversed(parts))

    return " ".join(words).strip()


def render_rupees_in_words(amount: Decimal | int | str) -> str:
    """
    Words for an invoice grand total: rounded to whole rupees, suffixed
    with "Rupees Only".
    """
    rupees = int(round_money(to_decimal(amount), decimal_places=0))
    return f"{render_amount_in_words(rupees)} Rupees Only"
