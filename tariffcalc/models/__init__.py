from decimal import Decimal, InvalidOperation


def format_inr(amount: float | Decimal) -> str:
    """Format a rupee amount: 1234.5 -> '₹1,234.50'"""
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}₹{abs(value):,.2f}"


def parse_amount(text: str) -> Decimal | None:
    """Parse operator input into a non-rounded Decimal. Returns None on invalid input.

    Accepts formats like '120', '120.5', '1,250.75' and a leading '₹'.
    """
    text = text.strip().lstrip("₹").strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value
