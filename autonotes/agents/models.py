"""
Request and report schemas shared by the agent builders, the heuristic
analyzer and the HTTP layer.

All models serialize with camelCase aliases (``nextSteps``, ``rawAnswer``)
and accept either spelling on input.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

VariableMap = dict[str, Any]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class SentimentScore(_CamelModel):
    label: Sentiment = Sentiment.NEUTRAL
    score: float = 0.0


class CallMetadata(_CamelModel):
    """Descriptive fields captured alongside a transcript.

    Fields
    ------
    title : str
        Human label for the call; required by the HTTP layer.
    account, contact, owner : str, optional
        CRM context. ``owner`` doubles as the agent user id.
    source : str
        How the transcript arrived (``upload``, ``paste``).
    source_name : str, optional
        Original file name for uploads.
    """

    title: Optional[str] = None
    account: Optional[str] = None
    contact: Optional[str] = None
    owner: Optional[str] = None
    source: str = "paste"
    source_name: Optional[str] = None


class TranscriptSubmission(_CamelModel):
    transcript: str
    metadata: CallMetadata = Field(default_factory=CallMetadata)


class CallAgentResult(_CamelModel):
    """Structured call notes. Lists are absent rather than empty."""

    summary: Optional[str] = None
    next_steps: Optional[list[str]] = None
    action_items: Optional[list[str]] = None
    objections: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    sentiment: SentimentScore = Field(default_factory=SentimentScore)
    duration_minutes: Optional[float] = None


class FinancialHealthInput(_CamelModel):
    company_name: str = ""
    reporting_period: Optional[str] = None
    balance_sheet: str = ""
    income_statement: str = ""
    cashflow_statement: str = ""


class FinancialHealthReport(_CamelModel):
    company_name: str
    reporting_period: Optional[str] = None
    summary: str
    status: str = "Unknown"
    score: float = 0.0
    strengths: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    liquidity_signal: Optional[str] = None
    profitability_signal: Optional[str] = None
    runway_signal: Optional[str] = None
    raw_answer: Optional[str] = None


class AgentRawResponse(BaseModel):
    """The subset of a mAIstro response the builders read."""

    answer: Optional[str] = None
    variables: VariableMap = Field(default_factory=dict)
    variables_expanded: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> "AgentRawResponse":
        """Build from arbitrary decoded JSON, dropping anything of the wrong shape."""
        if not isinstance(payload, dict):
            logger.warning("Agent response body was not a JSON object; treating it as empty.")
            return cls()

        answer = payload.get("answer")
        variables = payload.get("variables")
        expanded = payload.get("variablesExpanded")

        entries = []
        if isinstance(expanded, list):
            for entry in expanded:
                if isinstance(entry, dict) and isinstance(entry.get("name"), str):
                    entries.append({"name": entry["name"], "value": entry.get("value")})

        return cls(
            answer=answer if isinstance(answer, str) else None,
            variables=dict(variables) if isinstance(variables, dict) else {},
            variables_expanded=entries,
        )
