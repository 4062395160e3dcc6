"""Fixed-point arithmetic for money and weight.

Money is NUMERIC scale 2 (rupiah, sen), weight is NUMERIC scale 3 (kg, gram).
Everything is decimal.Decimal end to end. No float anywhere in the ledger.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.bs_common.errors import AmountOutOfRangeError, NonPositiveAmountError

MONEY_QUANT = Decimal("0.01")
WEIGHT_QUANT = Decimal("0.001")

# Largest values the NUMERIC columns hold.
MAX_WEIGHT = Decimal("9999999.999")          # NUMERIC(10, 3)
MAX_PRICE = Decimal("99999999.99")           # NUMERIC(10, 2)
MAX_AMOUNT = Decimal("9999999999999.99")     # NUMERIC(15, 2)

ZERO_MONEY = Decimal("0.00")
ZERO_WEIGHT = Decimal("0.000")


def to_decimal(value: Decimal | int | str | float) -> Decimal:
    """Coerce a number to Decimal. Floats go through str() so 0.1 stays 0.1."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal number: {value!r}") from exc


def quantize_money(value: Decimal | int | str | float) -> Decimal:
    return to_decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def quantize_weight(value: Decimal | int | str | float) -> Decimal:
    return to_decimal(value).quantize(WEIGHT_QUANT, rounding=ROUND_HALF_UP)


def require_positive_money(
    field: str, value: Decimal | int | str | float, maximum: Decimal = MAX_AMOUNT
) -> Decimal:
    """Quantize to scale 2 and reject NaN/Infinity/zero/negative/over `maximum`."""
    return _require_positive(field, value, MONEY_QUANT, maximum)


def require_positive_price(field: str, value: Decimal | int | str | float) -> Decimal:
    return require_positive_money(field, value, MAX_PRICE)


def require_positive_weight(field: str, value: Decimal | int | str | float) -> Decimal:
    """Quantize to scale 3 and reject NaN/Infinity/zero/negative/over MAX_WEIGHT."""
    return _require_positive(field, value, WEIGHT_QUANT, MAX_WEIGHT)


def require_amount_in_range(field: str, amount: Decimal) -> Decimal:
    """Reject a computed money value that would overflow NUMERIC(15, 2)."""
    if amount > MAX_AMOUNT:
        raise AmountOutOfRangeError(field, amount, MAX_AMOUNT)
    return amount


def _require_positive(
    field: str, value: Decimal | int | str | float, quant: Decimal, maximum: Decimal
) -> Decimal:
    try:
        dec = to_decimal(value)
    except ValueError:
        raise NonPositiveAmountError(field, value) from None
    if not dec.is_finite() or dec <= 0:
        raise NonPositiveAmountError(field, value)
    # Bound before quantizing: quantize() raises InvalidOperation once the
    # digits exceed the context precision.
    if dec > maximum:
        raise AmountOutOfRangeError(field, value, maximum)
    dec = dec.quantize(quant, rounding=ROUND_HALF_UP)
    if dec <= 0:
        raise NonPositiveAmountError(field, value)
    if dec > maximum:
        raise AmountOutOfRangeError(field, value, maximum)
    return dec


def line_amount(weight: Decimal, unit_price: Decimal) -> Decimal:
    """weight (kg) x price per kg, rounded half-up to the sen."""
    return quantize_money(weight * unit_price)


def rupiah_display(amount: Decimal) -> str:
    """Format as Indonesian rupiah: 71000 -> 'Rp71.000,00', -8875 -> '-Rp8.875,00'."""
    amount = quantize_money(amount)
    sign = "-" if amount < 0 else ""
    whole, frac = f"{abs(amount):,.2f}".split(".")
    return f"{sign}Rp{whole.replace(',', '.')},{frac}"


def weight_display(weight: Decimal) -> str:
    """Format a weight with gram precision: Decimal('10.5') -> '10.500 kg'."""
    return f"{quantize_weight(weight)} kg"
