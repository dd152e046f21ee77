"""Services — IO-bound shell around the pure core.

Invariants:
    - Services take an AsyncSession, flush their own writes, and never commit
    - Routes construct services per request and own the transaction boundary
"""
