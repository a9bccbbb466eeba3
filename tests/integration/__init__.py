"""Integration tests for components working together as a system.

No mocks for the transport: sessions talk to a websockets server bound to
a free local port. No external services are required.
"""
