"""Infrastructure Layer — database sessions, external clients, and cross-cutting concerns.

Invariants:
    - Infrastructure depends only on config and core/errors, never on services
    - All external calls wrapped with retry/timeout/error mapping
"""
