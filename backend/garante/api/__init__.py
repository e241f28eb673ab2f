"""API Layer - FastAPI routes, caller resolution and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses
    - The caller is resolved once per request (api/dependencies.py)

Design Decisions:
    - Thin routes delegate to services; services delegate decisions to core
"""
