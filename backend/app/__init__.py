"""Gatherwise Application Package — multi-tenant church management API.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
