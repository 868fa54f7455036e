"""Route Modules — one file per resource/concern (auth, favorites, health).

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (delegate to services)
    - Protected routes depend on require_user; public routes on get_request_context

Design Decisions:
    - Explicit registration in main.py over auto-discovery (ADR: ExMA anti-pattern)
"""
