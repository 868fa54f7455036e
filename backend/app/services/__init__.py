"""Services Layer — user directory, favorites, and the auth gate.

Invariants:
    - Services depend on core Protocols only (PersistenceBackend, IdentityVerifier)
    - Preconditions are checked before any backend call

Design Decisions:
    - One service per concern for locality (ADR: ExMA no god objects)
"""
