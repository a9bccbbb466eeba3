"""Unit tests for individual components in isolation.

Coverage:
    - parsing/: Sanitization, PDF extraction and corpus assembly
    - session/: Frame classification, chat log merging and the state machine
    - config and the terminal entry point

No network access. PDFs are built in memory by conftest fixtures.
"""
