"""tests.integration package

Integration suites that drive the FastAPI application through ``TestClient``.
Run only these with ``pytest -m integration``; the unit subset stays fast.
"""
