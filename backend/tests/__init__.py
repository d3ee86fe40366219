"""SpeechRelay Test Suite.

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures and remote service fakes
    ├── unit/                # One component at a time
    └── integration/         # Full app over ASGI with faked remotes

Run all tests:
    pytest

Run specific test categories:
    pytest backend/tests/unit
    pytest -m integration
"""
