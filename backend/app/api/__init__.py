"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.create_app() (no auto-discovery)
    - Identity resolved by dependencies before any handler body runs
    - All endpoints return structured JSON responses (except the dev-login redirect)

Design Decisions:
    - Thin routes delegate to services (ADR: ExMA impureim sandwich)
"""
