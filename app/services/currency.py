from decimal import Decimal, ROUND_HALF_UP

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

CENTS = Decimal("0.01")

def get_currency_symbol(currency_code: str) -> str:
    """Returns the currency symbol for a given currency code."""
    return CURRENCY_SYMBOLS.get(currency_code.upper(), "")

def to_money(value) -> Decimal:
    """Coerce form floats, strings and Numeric columns to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)

def format_amount(value, currency_code: str = "INR") -> str:
    return f"{get_currency_symbol(currency_code)}{to_money(value):,.2f}"
