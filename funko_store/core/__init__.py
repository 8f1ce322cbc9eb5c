"""Core Layer - pure domain logic, no IO, no async, no filesystem.

Invariants:
    - No module in core/ imports from services/, schemas/ or infrastructure/
    - Framing functions are pure and deterministic over their inputs

Design Decisions:
    - Functional core separated from imperative shell: sockets and files live in
      services/ and infrastructure/, byte-level framing lives here
"""
