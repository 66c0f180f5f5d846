"""NeuralSeek mAIstro client.

One POST per call to ``<base>/maistro`` with bearer auth. No retries: a
non-2xx status or a transport failure fails the whole operation.

Example:
    raw = await call_maistro(settings, settings.call_agent, params, user_id="jane")
    raw.answer, raw.variables
"""

import logging
from typing import Any, Optional

import httpx

from autonotes.utils.config import AgentSettings
from autonotes.utils.error_handler import ConfigurationMissingError, UpstreamRequestError

from .models import AgentRawResponse

logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "AutoNotesUser"

AgentParams = list[dict[str, str]]


def get_headers(settings: AgentSettings) -> dict:
    """Get API request headers."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.api_key}",
    }


def build_payload(agent: str, params: AgentParams, user_id: str) -> dict[str, Any]:
    return {
        "ntl": "",
        "agent": agent,
        "params": params,
        "options": {
            "streaming": False,
            "user_id": user_id,
            "lastTurn": [],
        },
        "returnVariables": True,
        "returnVariablesExpanded": True,
        "returnRender": False,
        "returnSource": False,
        "maxRecursion": 10,
    }


async def call_maistro(
    settings: AgentSettings,
    agent: Optional[str],
    params: AgentParams,
    user_id: str = DEFAULT_USER_ID,
    client: Optional[httpx.AsyncClient] = None,
) -> AgentRawResponse:
    """
    Run a mAIstro agent and return its answer and variables.

    Args:
        settings: Base URL, API key and timeout.
        agent: Agent name to run.
        params: Ordered ``{"name", "value"}`` string parameters.
        user_id: Forwarded as ``options.user_id``.
        client: Optional shared client; one is created per call otherwise.

    Raises:
        ConfigurationMissingError: before any I/O when settings are incomplete.
        UpstreamRequestError: on non-2xx responses or transport failures.
    """
    if not settings.is_base_configured:
        raise ConfigurationMissingError("NeuralSeek base URL or API key missing")
    if not agent:
        raise ConfigurationMissingError("NeuralSeek agent name is missing")

    url = f"{settings.base_url}/maistro"
    payload = build_payload(agent, params, user_id)
    logger.info(f"Calling NeuralSeek agent '{agent}' with {len(params)} params", extra={"agent": agent})

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.timeout) as owned_client:
                response = await owned_client.post(url, headers=get_headers(settings), json=payload)
        else:
            response = await client.post(url, headers=get_headers(settings), json=payload)
    except httpx.HTTPError as e:
        logger.error(
            f"NeuralSeek request to agent '{agent}' failed: {type(e).__name__}: {e}", extra={"agent": agent}
        )
        raise UpstreamRequestError(f"NeuralSeek request failed: {e}") from e

    if not response.is_success:
        logger.error(
            f"NeuralSeek agent '{agent}' returned HTTP {response.status_code}",
            extra={"agent": agent, "status_code": response.status_code},
        )
        raise UpstreamRequestError.from_response(response.status_code, response.text)

    try:
        data = response.json()
    except ValueError:
        logger.warning(f"NeuralSeek agent '{agent}' returned a non-JSON body", extra={"agent": agent})
        data = None

    return AgentRawResponse.from_payload(data)
