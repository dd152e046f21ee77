"""Pure Core — coin change, purchase planning, ownership and error types.

Invariants:
    - Nothing in core imports from services, api, models or infrastructure
    - Core functions are synchronous and side-effect free
"""
