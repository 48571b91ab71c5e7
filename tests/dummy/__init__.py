"""Dummy ASGI application used by the test suite."""
