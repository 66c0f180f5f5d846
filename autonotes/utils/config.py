"""
Agent configuration - one explicit settings value per process or per test.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class AgentSettings:
    """Connection details for the NeuralSeek mAIstro endpoint.

    A purpose (call notes, financial health) is only "configured" when the
    base URL, the API key and that purpose's agent name are all present.
    """

    base_url: Optional[str] = None
    api_key: Optional[str] = None
    call_agent: Optional[str] = None
    financial_agent: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        base_url = _clean(self.base_url)
        if base_url:
            base_url = base_url.rstrip("/")
        object.__setattr__(self, "base_url", base_url)
        object.__setattr__(self, "api_key", _clean(self.api_key))
        object.__setattr__(self, "call_agent", _clean(self.call_agent))
        object.__setattr__(self, "financial_agent", _clean(self.financial_agent))

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "AgentSettings":
        """Read settings from the environment, loading `.env` first."""
        load_dotenv(dotenv_path=dotenv_path)
        raw_timeout = os.getenv("NEURALSEEK_TIMEOUT", "")
        try:
            timeout = float(raw_timeout) if raw_timeout.strip() else DEFAULT_TIMEOUT
        except ValueError:
            logger.warning(f"Ignoring invalid NEURALSEEK_TIMEOUT value: {raw_timeout!r}")
            timeout = DEFAULT_TIMEOUT

        return cls(
            base_url=os.getenv("NEURALSEEK_BASE_URL"),
            api_key=os.getenv("NEURALSEEK_API_KEY"),
            call_agent=os.getenv("NEURALSEEK_AGENT"),
            financial_agent=os.getenv("NEURALSEEK_FIN_AGENT"),
            timeout=timeout,
        )

    @property
    def is_base_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    @property
    def is_call_notes_configured(self) -> bool:
        return bool(self.is_base_configured and self.call_agent)

    @property
    def is_financial_configured(self) -> bool:
        return bool(self.is_base_configured and self.financial_agent)
