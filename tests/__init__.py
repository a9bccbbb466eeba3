"""Test package for document analysis chat.

Structure:
    - unit/: Extraction, protocol and session logic in isolation
    - integration/: Sessions against a local WebSocket backend

Unit tests replace the connection with the in-memory transport in
fakes.py. Leverages pytest with pytest-check for soft assertions.
"""
