"""src/api/routes/__init__.py
###############################################################################
FastAPI router package marker.
###############################################################################
Each route module (*files.py*, *classifications.py*, *model.py*, *admin.py*)
defines a module-level ``router`` of type ``fastapi.APIRouter``. Registration
happens in :pymod:`src.api.app`.
"""

from __future__ import annotations

__all__: list[str] = []
