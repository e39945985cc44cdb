"""API Layer — FastAPI routes, error handlers, and the recovery middleware.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes; failure reporting lives in middleware, not in handlers
"""
