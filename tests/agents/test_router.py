import json

import httpx
import pytest
from unittest.mock import patch

from autonotes.agents.models import CallMetadata, FinancialHealthInput, Sentiment, TranscriptSubmission
from autonotes.agents.router import generate_financial_report, process_transcript
from autonotes.utils.error_handler import ConfigurationMissingError, UpstreamRequestError


@pytest.fixture
def form():
    return FinancialHealthInput(
        company_name="Acme",
        balance_sheet="Current Assets: 500\nCurrent Liabilities: 300",
        income_statement="Net Income: $2.5 million",
        cashflow_statement="Operating cash flow: 400K",
    )


@pytest.mark.asyncio
async def test_unconfigured_financial_path_uses_heuristics(form, unconfigured_settings):
    with patch("autonotes.agents.router.run_financial_health_agent") as mock_agent:
        report = await generate_financial_report(form, unconfigured_settings)

    mock_agent.assert_not_called()
    assert report.raw_answer == "Generated locally from pasted statements."
    assert report.company_name == "Acme"


@pytest.mark.asyncio
async def test_configured_financial_path_calls_agent(form, configured_settings):
    def handler(request):
        return httpx.Response(200, json={"answer": "Healthy.", "variables": {"healthScore": 0.8}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        report = await generate_financial_report(form, configured_settings, client=client)

    assert report.summary == "Healthy."
    assert report.status == "Strong"
    assert report.raw_answer == "Healthy."


@pytest.mark.asyncio
async def test_agent_failure_is_not_replaced_by_heuristics(form, configured_settings):
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(503, text="down"))) as client:
        with pytest.raises(UpstreamRequestError):
            await generate_financial_report(form, configured_settings, client=client)


@pytest.mark.asyncio
async def test_call_notes_require_configuration(unconfigured_settings):
    submission = TranscriptSubmission(transcript="hello", metadata=CallMetadata(title="Intro"))
    with pytest.raises(ConfigurationMissingError):
        await process_transcript(submission, unconfigured_settings)


@pytest.mark.asyncio
async def test_call_notes_use_owner_as_user_id(configured_settings):
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"variables": {"summary": "Good call", "sentiment": "negative"}})

    submission = TranscriptSubmission(transcript="hello", metadata=CallMetadata(title="Intro", owner="jane"))
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await process_transcript(submission, configured_settings, client=client)

    assert seen["body"]["agent"] == "call_notes"
    assert seen["body"]["options"]["user_id"] == "jane"
    assert result.summary == "Good call"
    assert result.sentiment.label == Sentiment.NEGATIVE
    assert result.sentiment.score == pytest.approx(-0.6)


@pytest.mark.asyncio
async def test_audit_records_carry_engine_and_agent(form, configured_settings, unconfigured_settings):
    with patch("autonotes.agents.router.log_audit_action") as mock_audit:
        await generate_financial_report(form, unconfigured_settings)
    mock_audit.assert_called_once()
    assert mock_audit.call_args.args[:2] == ("Acme", "FINANCIAL_HEALTH_LOCAL")
    assert mock_audit.call_args.kwargs == {"engine": "heuristics"}

    handler = lambda r: httpx.Response(200, json={"answer": "Fine."})
    with patch("autonotes.agents.router.log_audit_action") as mock_audit:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await generate_financial_report(form, configured_settings, client=client)
    actions = [call.args[1] for call in mock_audit.call_args_list]
    assert actions == ["STARTED_FINANCIAL_HEALTH_AGENT", "COMPLETED_FINANCIAL_HEALTH_AGENT"]
    for call in mock_audit.call_args_list:
        assert call.kwargs == {"engine": "neuralseek", "agent": "fin_health"}
