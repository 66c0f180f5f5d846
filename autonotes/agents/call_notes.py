import json
import logging
from typing import Optional

import httpx

from autonotes.utils.config import AgentSettings

from .extractors import parse_sentiment_value
from .maistro_client import DEFAULT_USER_ID, AgentParams, call_maistro
from .models import AgentRawResponse, CallAgentResult, TranscriptSubmission
from .resolver import candidates, pick_first_list, pick_first_number, pick_first_string
from .variables import extract_variables, normalize_variable_keys

logger = logging.getLogger(__name__)


def build_call_params(submission: TranscriptSubmission) -> AgentParams:
    metadata = submission.metadata
    return [
        {"name": "callTranscript", "value": submission.transcript},
        {"name": "callTitle", "value": metadata.title or ""},
        {"name": "callAccount", "value": metadata.account or ""},
        {"name": "callContact", "value": metadata.contact or ""},
        {"name": "callOwner", "value": metadata.owner or ""},
        {"name": "callSource", "value": metadata.source},
        {"name": "callSourceName", "value": metadata.source_name or ""},
        {"name": "callMetadata", "value": json.dumps(metadata.model_dump(by_alias=True, exclude_none=True))},
    ]


def build_call_agent_result(raw: AgentRawResponse) -> CallAgentResult:
    """Resolve call notes from an agent response. Never raises on odd shapes."""
    variables = normalize_variable_keys(extract_variables(raw))

    sentiment_source = next(
        (value for value in candidates(variables, "sentiment", "sentimentAnalysis")
         if isinstance(value, (str, dict))),
        None,
    )

    return CallAgentResult(
        summary=pick_first_string(*candidates(variables, "summary", "callSummary"), raw.answer),
        next_steps=pick_first_list(*candidates(variables, "nextSteps", "followUps")),
        action_items=pick_first_list(*candidates(variables, "actionItems", "nextSteps")),
        objections=pick_first_list(*candidates(variables, "objections", "concerns", "risks")),
        tags=pick_first_list(*candidates(variables, "tags", "labels")),
        sentiment=parse_sentiment_value(sentiment_source),
        duration_minutes=pick_first_number(
            *candidates(variables, "durationMinutes", "estimatedDurationMinutes")
        ),
    )


async def run_call_notes_agent(
    submission: TranscriptSubmission,
    settings: AgentSettings,
    client: Optional[httpx.AsyncClient] = None,
) -> CallAgentResult:
    raw = await call_maistro(
        settings,
        settings.call_agent,
        build_call_params(submission),
        user_id=submission.metadata.owner or DEFAULT_USER_ID,
        client=client,
    )
    result = build_call_agent_result(raw)
    logger.info(
        f"Call notes ready for '{submission.metadata.title}': "
        f"sentiment={result.sentiment.label.value}, "
        f"{len(result.next_steps or [])} next steps"
    )
    return result
