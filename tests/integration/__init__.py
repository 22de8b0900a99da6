"""Integration tests for redislog.

These tests exercise sinks and the assembled pipeline against an
in-process fakeredis server.

Markers:
- @pytest.mark.integration - All integration tests
"""
