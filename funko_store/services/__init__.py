"""Services Layer - request dispatch and per-connection handling.

Invariants:
    - Dispatch uses an explicit dict mapping (no auto-discovery)
    - Every request resolves to exactly one response

Design Decisions:
    - Connection handling split from dispatch: dispatch knows nothing about sockets
"""
