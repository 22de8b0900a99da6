"""Unit tests for redislog core functionality.

Unit tests should:
- Not require a Redis store
- Test individual functions and classes in isolation
- Use in-memory sinks or mocks for dependencies
"""
