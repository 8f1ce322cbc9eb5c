"""Pydantic Schemas - record model and wire messages.

Invariants:
    - Schemas validate at system boundary (wire payloads, files on disk)
    - Domain enums from core/ used for enum fields

Design Decisions:
    - Wire field names (Spanish, camelCase) kept as aliases; Python attributes
      stay snake_case English
"""
