"""Session configuration with environment variable loading.

Pydantic-based settings for the connection to the analysis backend.
The streaming endpoint lives on the same origin as the page; its scheme
follows the origin's (https -> wss, http -> ws).
"""

import os

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_ORIGIN = "http://localhost:8080"
DEFAULT_ENDPOINT_PATH = "/api/v1/doc-analysis"
DEFAULT_MAX_FRAME_SIZE = 1024 * 1024  # 1MB

_STREAM_SCHEMES = {"http": "ws", "https": "wss"}


class SessionConfig(BaseModel):
    """Configuration for the document analysis session.

    Attributes:
        origin: Origin serving the application (scheme, host and port).
        endpoint_path: Path of the streaming endpoint on that origin.
        open_timeout: Seconds allowed for the connection handshake.
        max_frame_size: Largest inbound frame accepted, in bytes.
    """

    origin: str = Field(
        default_factory=lambda: os.getenv("DOC_ANALYSIS_ORIGIN", DEFAULT_ORIGIN),
        validate_default=True,
        description="Origin of the analysis backend",
    )
    endpoint_path: str = Field(
        default=DEFAULT_ENDPOINT_PATH,
        description="Path of the streaming endpoint",
    )
    open_timeout: float = Field(
        default_factory=lambda: float(os.getenv("DOC_ANALYSIS_OPEN_TIMEOUT", "10")),
        gt=0.0,
        description="Connection handshake timeout in seconds",
    )
    max_frame_size: int = Field(
        default_factory=lambda: int(
            os.getenv("DOC_ANALYSIS_MAX_FRAME_SIZE", str(DEFAULT_MAX_FRAME_SIZE))
        ),
        ge=1,
        description="Maximum inbound frame size in bytes",
    )

    @field_validator("origin")
    @classmethod
    def validate_origin(cls, v: str) -> str:
        """Require an http(s) origin and drop any trailing slash."""
        v = v.strip().rstrip("/")
        scheme = v.split("://", 1)[0].lower() if "://" in v else ""
        if scheme not in _STREAM_SCHEMES:
            raise ValueError(
                "Origin must be an http:// or https:// URL. Set DOC_ANALYSIS_ORIGIN in .env"
            )
        return v

    @field_validator("endpoint_path")
    @classmethod
    def validate_endpoint_path(cls, v: str) -> str:
        """Ensure the endpoint path is absolute."""
        v = v.strip()
        return v if v.startswith("/") else f"/{v}"

    @property
    def endpoint_url(self) -> str:
        """Streaming endpoint URL derived from the origin."""
        origin = httpx.URL(self.origin)
        url = origin.copy_with(
            scheme=_STREAM_SCHEMES[origin.scheme],
            path=self.endpoint_path,
        )
        return str(url)


def get_session_config() -> SessionConfig:
    """Create session configuration from environment.

    Returns:
        Configured SessionConfig instance.

    Raises:
        ValueError: If DOC_ANALYSIS_ORIGIN is not an http(s) URL.
    """
    return SessionConfig()
