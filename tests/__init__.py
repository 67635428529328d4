"""
Test suite for typedunits

Contains:
- tests/unit/          : Unit tests for individual modules
- tests/static/        : Quarantined snippets checked by mypy, never imported
"""
