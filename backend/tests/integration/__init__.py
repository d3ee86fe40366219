"""Integration tests for SpeechRelay.

Integration tests:
- Drive the FastAPI application through HTTP
- Use the real provider and store clients against in-process fakes
- Test component interactions end to end

Markers:
- @pytest.mark.integration - All integration tests
- @pytest.mark.slow - Tests that wait on real timers
"""
