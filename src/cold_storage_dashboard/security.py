import csv
import tempfile
import unicodedata
from decimal import Decimal
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Iterable, Sequence


def _is_relative_to(path: Path, base: Path) -> bool:
    try:
        path.relative_to(base)
        return True
    except ValueError:
        return False


def sanitize_path(path_str: str, project_root: Path) -> Path:
    if not path_str:
        raise ValueError("path required")
    normalized = unicodedata.normalize("NFKC", path_str)
    if ".." in normalized or ".." in Path(normalized).parts:
        raise ValueError("path traversal not allowed")
    if "\u202e" in normalized or "\u202d" in normalized:
        raise ValueError("unsafe unicode in path")

    tmp_root = Path(tempfile.gettempdir()).resolve()
    project_root = project_root.resolve()
    raw_path = Path(normalized)
    if raw_path.is_absolute():
        resolved = raw_path.resolve()
    else:
        resolved = (project_root / raw_path).resolve()

    allowed = any(
        _is_relative_to(resolved, root) for root in (project_root, tmp_root)
    )
    if not allowed:
        raise ValueError("path outside allowed roots")
    for parent in [resolved] + list(resolved.parents):
        if parent.exists() and parent.is_symlink():
            raise ValueError("symlink paths not allowed")
    return resolved


def neutralize_csv_field(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        text = value.isoformat(sep=" ")
    elif isinstance(value, Decimal):
        text = format(value, "f")
    else:
        text = str(value)
    # Survey free text may start with a formula trigger; spreadsheets must not run it.
    if text.startswith(("=", "+", "-", "@")) and not _is_number(text):
        return "'" + text
    return text


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def write_csv(handle: IO[str], fieldnames: Sequence[str], rows: Iterable[dict]) -> None:
    writer = csv.DictWriter(handle, fieldnames=list(fieldnames))
    writer.writeheader()
    for row in rows:
        writer.writerow({k: neutralize_csv_field(row.get(k)) for k in fieldnames})
