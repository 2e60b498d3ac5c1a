from datetime import datetime


def format_timestamp(value: datetime) -> str:
    """Render a timestamp the way the dump files spell it.

    Dump timestamps carry milliseconds and no offset
    (e.g. "2009-03-05T22:28:34.823"). Aware datetimes keep their offset.
    """
    return value.isoformat(timespec="milliseconds")
