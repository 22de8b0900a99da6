"""redislog test suite.

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures for all tests
    ├── unit/                # Unit tests (no store)
    └── integration/         # Sinks and pipeline against fakeredis

Run all tests:
    pytest

Run specific test categories:
    pytest tests/unit
    pytest -m integration
"""
