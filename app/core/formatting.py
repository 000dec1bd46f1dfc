# app/core/formatting.py
SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def format_bytes(size, decimals: int = 2) -> str:
    """Human readable size with 1024 steps, e.g. 1536 -> '1.5 KB'."""
    if not size or size < 1:
        return "0 Bytes"
    decimals = max(decimals, 0)

    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(SIZE_UNITS) - 1:
        exponent += 1
    value = size / 1024 ** exponent

    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[exponent]}"
