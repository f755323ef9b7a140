"""Compatibility shim for src-layout imports.

The real package lives in src/cold_storage_dashboard. Running
`python -m cold_storage_dashboard` from the repo root without an install would
otherwise find this directory first and treat it as an empty namespace.

This shim extends the package search path to include src/ and exposes the
public symbols lazily.
"""

from __future__ import annotations

from pathlib import Path
import sys

_SRC_DIR = Path(__file__).resolve().parent.parent / "src"
_IMPL_PKG_DIR = _SRC_DIR / "cold_storage_dashboard"

if _IMPL_PKG_DIR.is_dir():
    src_str = str(_SRC_DIR)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)

    impl_str = str(_IMPL_PKG_DIR)
    if impl_str not in list(__path__):  # type: ignore[name-defined]
        __path__.append(impl_str)  # type: ignore[name-defined]

    __all__ = ["FilterCriteria", "load_dashboard"]
else:
    __all__ = []


def __getattr__(name: str):
    if name in ("FilterCriteria", "load_dashboard", "DashboardResult", "FacetSet"):
        from . import summary

        return getattr(summary, name)
    raise AttributeError(name)
