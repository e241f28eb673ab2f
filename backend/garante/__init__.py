"""Garante Application Package - guarantee, dispute and restitution arbitration service.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
