from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


_CET = ZoneInfo("CET")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def format_timestamp(value: object, tz: ZoneInfo = _CET) -> str:
    if not value:
        return "-"
    return datetime.fromtimestamp(int(value), tz=tz).strftime(TIMESTAMP_FORMAT)
