"""Money handling at the edge of the calculators.

``parse_money`` turns user-entered text into a validated Decimal before it
reaches a calculator. ``ensure_money`` is the check every calculator applies
to its own arguments.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from tradetax.calculators.errors import InvalidInput

PENCE = Decimal("0.01")
ZERO = Decimal("0")

_STRIP_CHARS = ("£", ",", " ", "\t", "\n")


def quantize_money(amount: Decimal) -> Decimal:
    """Round an amount to the nearest penny, halves away from zero."""
    return amount.quantize(PENCE, rounding=ROUND_HALF_UP)


def parse_money(value: Decimal | int | float | str | None, field: str = "amount") -> Decimal:
    """Parse a user-supplied money value into pennies.

    Accepts Decimal, int, float or text such as ``"£1,234.50"``. Blank text
    and None count as zero.

    Raises:
        InvalidInput: If the value is malformed, not finite, or negative.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number, not {value!r}.")

    if isinstance(value, str):
        text = value.strip()
        for char in _STRIP_CHARS:
            text = text.replace(char, "")
        if not text:
            return ZERO
    else:
        text = str(value)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidInput(f"{field} is not a valid amount: {value!r}.") from None

    if not amount.is_finite():
        raise InvalidInput(f"{field} is not a valid amount: {value!r}.")
    if amount < 0:
        raise InvalidInput(f"{field} must be non-negative.")
    return quantize_money(amount)


def ensure_money(value: Decimal | int, field: str) -> Decimal:
    """Check a calculator argument is a finite, non-negative Decimal or int."""
    if isinstance(value, bool) or not isinstance(value, (Decimal, int)):
        raise InvalidInput(f"{field} must be a Decimal, got {type(value).__name__}.")
    amount = Decimal(value)
    if not amount.is_finite():
        raise InvalidInput(f"{field} must be finite.")
    if amount < 0:
        raise InvalidInput(f"{field} must be non-negative.")
    return amount
