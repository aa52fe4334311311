"""Display helpers shared with the post-purchase extension."""
from typing import Optional, Union


def format_time(seconds: int) -> str:
    """Format a countdown as m:ss."""
    seconds = max(int(seconds), 0)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def format_currency(amount: Optional[Union[str, int, float]], symbol: str = "£") -> str:
    """Format a money amount, showing "Free" for nothing or zero."""
    if amount is None or amount == "":
        return "Free"
    try:
        whole = int(float(amount))
    except (TypeError, ValueError):
        return f"{symbol}{amount}"
    if whole == 0:
        return "Free"
    return f"{symbol}{amount}"
