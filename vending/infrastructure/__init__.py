"""Infrastructure — database sessions, logging setup and credential handling.

Invariants:
    - Infrastructure may import core, never services or api
"""
