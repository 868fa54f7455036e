"""Infrastructure Layer — persistence variants, identity tokens, and cross-cutting concerns.

Invariants:
    - Infrastructure implements core Protocols; core never imports from here
    - All driver/file errors mapped to core.errors before leaving this layer

Design Decisions:
    - Two PersistenceBackend variants side by side, chosen by backend_selection
      (ADR: ExMA single responsibility)
"""
