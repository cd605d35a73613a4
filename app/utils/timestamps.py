from typing import Any

# same layout MySQL uses for DATETIME columns
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(value: Any) -> str | None:
    if value is None:
        return None
    if hasattr(value, "strftime"):
        return value.strftime(TIMESTAMP_FORMAT)
    return str(value)
