"""
Formatting utilities.
"""

CURRENCY_SYMBOLS = {
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
}


def format_currency(amount: float, currency: str = "USD") -> str:
    """
    Format an amount as currency, rounded to the nearest whole unit.

    Args:
        amount: The amount in major units (e.g., dollars, not cents).
            Negative amounts keep their sign in front of the symbol.
        currency: Currency code (default USD).

    Returns:
        Formatted currency string, e.g. "$181,234" or "-$1,200".
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    whole = int(round(amount))
    sign = "-" if whole < 0 else ""
    return f"{sign}{symbol}{abs(whole):,}"


def format_area(square_feet: float) -> str:
    """
    Format a floor or lot area in square feet.

    Args:
        square_feet: Area in sqft.

    Returns:
        Formatted area string, e.g. "1,500 sqft".
    """
    return f"{int(round(square_feet)):,} sqft"
