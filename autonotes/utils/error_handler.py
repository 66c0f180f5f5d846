import logging
from typing import Optional

logger = logging.getLogger(__name__)

class AutoNotesError(Exception):
    """Base exception for the autonotes service."""
    pass

class ConfigurationMissingError(AutoNotesError):
    """Base URL, API key or agent name is not set; raised before any network call."""
    pass

class UpstreamRequestError(AutoNotesError):
    """The agent endpoint answered with a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, status_code: int, body: str) -> "UpstreamRequestError":
        detail = body or "Unknown error"
        logger.error(f"NeuralSeek returned HTTP {status_code}")
        return cls(f"NeuralSeek request failed with {status_code}: {detail}", status_code, body)

class SpreadsheetConversionError(AutoNotesError):
    pass
