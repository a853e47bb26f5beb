"""Services Layer — async units of work over an injected AsyncSession.

Invariants:
    - Every service function receives the session explicitly (no globals)
    - Multi-row writes commit once or roll back once

Design Decisions:
    - One module per concern (identity, accounts, roles, pathways...) for locality
"""
