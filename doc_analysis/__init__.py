"""Document Analysis Chat - streaming multi-turn chat about uploaded documents.

Combines pypdf for text extraction, websockets for the duplex connection to
the analysis backend, and Pydantic for data validation.

Components:
    - parsing: PDF/text extraction, sanitization and corpus assembly
    - session: connection lifecycle, frame protocol and the chat log
    - models: Chat, session and document schemas
    - config: Endpoint and connection settings
"""

__version__ = "0.1.0"
