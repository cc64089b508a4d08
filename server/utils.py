from pathlib import Path
from typing import Any, Dict, List, Optional


def parse_optional_int(value: Optional[Any]) -> Optional[int]:
    """Convert document/form values to integers while allowing blanks.

    Returns ``None`` when the input is ``None`` or an empty string. Values
    that are already integers are returned unchanged and integral floats are
    narrowed. Booleans and non-convertible inputs result in ``None`` so the
    caller decides whether that means "missing".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    s = str(value).strip()
    if not s:
        return None
    try:
        return int(s)
    except (TypeError, ValueError):
        return None


def parse_positive_int(value: Optional[Any]) -> Optional[int]:
    """Like :func:`parse_optional_int` but only positive values survive."""
    parsed = parse_optional_int(value)
    return parsed if parsed is not None and parsed > 0 else None


def normalize_optional_str(value: Optional[Any]) -> Optional[str]:
    """Return a trimmed string or ``None`` when the input is blank."""
    if value is None:
        return None
    stripped = value.strip() if isinstance(value, str) else str(value).strip()
    return stripped or None


def truthy(val: Optional[str]) -> bool:
    return str(val or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def read_csv_rows(path: Path) -> List[Dict[str, str]]:
    import csv

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return [{k: (v or "").strip() for k, v in row.items()} for row in reader]
