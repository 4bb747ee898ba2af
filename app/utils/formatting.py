"""
Display formatting helpers
"""

def format_vnd(amount: float) -> str:
    """Format an amount with thousands separators and at most two decimals.

    >>> format_vnd(25000000)
    '25,000,000'
    >>> format_vnd(1234.5)
    '1,234.5'
    """
    text = f"{amount:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
