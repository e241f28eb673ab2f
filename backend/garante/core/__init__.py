"""Core Layer - pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic; time is always passed in

Design Decisions:
    - Functional core separated from imperative shell: guards return errors,
      transitions mutate in-memory entities, services persist
"""
