"""Infrastructure Layer - filesystem persistence and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - Every OS-level failure mapped to a typed error or a False result, never
      leaked to the client as a raw exception

Design Decisions:
    - Blocking filesystem calls pushed to the default executor so the event loop
      keeps serving other connections
"""
