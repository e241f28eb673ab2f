"""Services Layer - the imperative shell around core.

Invariants:
    - Each mutating method is one transaction: load under lock, guard, apply, commit
    - Guard errors are raised before any mutation
"""
