import json
from datetime import datetime, timezone
from typing import Any, List, Optional

SQL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
# rango de INTEGER en sqlite
SQL_INT_MIN = -(2 ** 63)
SQL_INT_MAX = 2 ** 63 - 1


def strip_or_none(x) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s if s else None


def to_positive_id(x) -> Optional[int]:
    """Identificador de ruta como entero positivo; None si es 0, negativo o no numérico."""
    if x is None or isinstance(x, bool):
        return None
    try:
        n = int(str(x).strip())
    except ValueError:
        return None
    return n if 0 < n <= SQL_INT_MAX else None


def iso_to_sql_datetime(iso) -> Optional[str]:
    # "2026-02-16T06:04:00" => "2026-02-16 06:04:00"
    if not iso or not isinstance(iso, str):
        return None
    s = iso.replace("T", " ", 1)[:19]
    if len(s) != 19:
        return None
    try:
        datetime.strptime(s, SQL_DATETIME_FORMAT)
    except ValueError:
        return None
    return s


def now_sql_datetime() -> str:
    # UTC, igual que datetime('now') de sqlite
    return datetime.now(timezone.utc).strftime(SQL_DATETIME_FORMAT)


def json_dumps(obj) -> str:
    return json.dumps(obj, ensure_ascii=False)


def json_loads_list(raw: Optional[str]) -> List[Any]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return value if isinstance(value, list) else []
