"""Unit tests for SpeechRelay core functionality.

Unit tests should:
- Not require network access
- Test individual functions and classes in isolation
- Use fakes or mocks for remote services
- Be fast to execute
"""
