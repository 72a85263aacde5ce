"""Human readable formatting for notification and CLI output"""

import math
from typing import Any


def format_value(value: str | float | int | None, prefix: str = "", decimals: int = 2) -> str:
    """Format a number with K/M/B suffixes

    Args:
        value: Number (or numeric string) to format
        prefix: Symbol placed before the digits, e.g. "$"
        decimals: Digits after the decimal point

    Returns:
        Formatted string, e.g. "$25.00K"

    Examples:
        >>> format_value(25000, "$")
        '$25.00K'
        >>> format_value(-1_500_000, "$", 1)
        '-$1.5M'
        >>> format_value("abc", "$")
        '$0'
    """
    try:
        num = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        num = 0.0

    if math.isnan(num) or num == 0:
        return f"{prefix}0"

    sign = "-" if num < 0 else ""
    abs_num = abs(num)

    if abs_num >= 1e9:
        return f"{sign}{prefix}{abs_num / 1e9:.{decimals}f}B"
    if abs_num >= 1e6:
        return f"{sign}{prefix}{abs_num / 1e6:.{decimals}f}M"
    if abs_num >= 1e3:
        return f"{sign}{prefix}{abs_num / 1e3:.{decimals}f}K"
    return f"{sign}{prefix}{abs_num:.{decimals}f}"


def format_market_cap(market_cap: str | float | int | None) -> str:
    return format_value(market_cap, "$", 2)


def format_percentage(ratio: str | float | None, decimals: int = 2) -> str:
    """Format a 0-1 ratio as a percentage string

    >>> format_percentage(0.125)
    '12.50%'
    >>> format_percentage(None)
    'N/A'
    """
    try:
        num = float(ratio)
    except (TypeError, ValueError):
        return "N/A"
    return f"{num * 100:.{decimals}f}%"


def generate_token_message(raw: dict[str, Any]) -> str:
    """Build the signal message for a newly admitted token

    Args:
        raw: Feed payload for the token (short-key format)

    Returns:
        Multi-line message text
    """
    return "\n".join(
        [
            "🎯 New token matched the admission filter",
            f"📝 Name: {raw.get('s', 'UNKNOWN')} ({raw.get('nm', '')})",
            f"🏷️ Address: {raw.get('a', '')}",
            f"💰 Market cap: {format_market_cap(raw.get('mc'))}",
            f"👥 Holders: {raw.get('hd', 'N/A')}",
            f"⚠️ Bundled: {format_percentage(raw.get('bdrr'))}",
            f"⚠️ Snipers: {format_percentage(raw.get('t70_shr'))}",
            f"⚠️ Rat traders: {format_percentage(raw.get('rat'))}",
            f"⚠️ Phishing wallets: {format_percentage(raw.get('etpr'))}",
        ]
    )
