import math


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _trim_decimal(value: float) -> str:
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def format_full_money(amount: float) -> str:
    """Grouped with dots, no decimals: 1234567 -> "1.234.567"."""
    text = f"{abs(amount):,.0f}".replace(",", ".")
    return f"-{text}" if amount < 0 and text != "0" else text


def format_currency(amount: float) -> str:
    return f"{format_full_money(amount)} ₫"


def format_compact_money(amount: float) -> str:
    if amount >= 1_000_000_000:
        return _trim_decimal(amount / 1_000_000_000) + " tỷ"
    if amount >= 1_000_000:
        return _trim_decimal(amount / 1_000_000) + "tr"
    if amount >= 1_000:
        return f"{round_half_up(amount / 1_000)}k"
    if amount == 0:
        return "0"
    return format_full_money(amount)


def format_amount_text(amount: float) -> str:
    """Plain decimal rendering without a trailing ".0" for whole amounts."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))
