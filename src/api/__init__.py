"""DocSense API package root.

The FastAPI application lives in :pymod:`src.api.app` and is re-exported here
so that ``uvicorn src.api:app`` works as well.
"""

from __future__ import annotations

from importlib import import_module as _import_module

_app_module = _import_module(".app", package=__name__)
app = _app_module.app  # type: ignore[attr-defined]
