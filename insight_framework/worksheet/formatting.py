"""Display formatting for measure values."""


def format_value(value: float, is_rate: bool = False) -> str:
    """
    Format a measure value for display.

    Rates are always on the 0-1 scale and render as a percentage with one
    decimal. Other values render with an M or K suffix above a million or a
    thousand, else as a thousands-separated integer.

    Examples:
        >>> format_value(0.2, is_rate=True)
        '20.0%'
        >>> format_value(1_500_000)
        '1.5M'
        >>> format_value(950.4)
        '950'
    """
    if is_rate:
        return f"{value * 100:.1f}%"
    magnitude = abs(value)
    if magnitude >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{round(value):,}"
