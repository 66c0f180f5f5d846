import logging
from typing import Optional

import httpx

from autonotes.utils.config import AgentSettings
from autonotes.utils.logging import log_audit_action

from .call_notes import run_call_notes_agent
from .financial_health import run_financial_health_agent
from .heuristics import build_mock_financial_report
from .models import CallAgentResult, FinancialHealthInput, FinancialHealthReport, TranscriptSubmission

logger = logging.getLogger(__name__)

ENGINE_AGENT = "neuralseek"
ENGINE_LOCAL = "heuristics"


async def generate_financial_report(
    form: FinancialHealthInput,
    settings: AgentSettings,
    client: Optional[httpx.AsyncClient] = None,
) -> FinancialHealthReport:
    """Score statements with the financial agent, or locally when it is not configured."""
    subject = form.company_name or "Unknown"

    if not settings.is_financial_configured:
        logger.info("Financial agent not configured; using local heuristics.", extra={"engine": ENGINE_LOCAL})
        report = build_mock_financial_report(form)
        log_audit_action(
            subject, "FINANCIAL_HEALTH_LOCAL", f"Heuristic report generated: {report.status}.",
            engine=ENGINE_LOCAL,
        )
        return report

    audit = {"engine": ENGINE_AGENT, "agent": settings.financial_agent}
    log_audit_action(subject, "STARTED_FINANCIAL_HEALTH_AGENT", "Financial agent request started.", **audit)
    try:
        report = await run_financial_health_agent(form, settings, client=client)
    except Exception as e:
        log_audit_action(subject, "FAILED_FINANCIAL_HEALTH_AGENT", f"Financial agent failed: {e}", **audit)
        raise
    log_audit_action(
        subject, "COMPLETED_FINANCIAL_HEALTH_AGENT", f"Agent report generated: {report.status}.", **audit
    )
    return report


async def process_transcript(
    submission: TranscriptSubmission,
    settings: AgentSettings,
    client: Optional[httpx.AsyncClient] = None,
) -> CallAgentResult:
    """Summarize a transcript with the call-notes agent. There is no offline path."""
    subject = submission.metadata.title or "Untitled call"
    audit = {"engine": ENGINE_AGENT, "agent": settings.call_agent}
    log_audit_action(subject, "STARTED_CALL_NOTES_AGENT", "Call notes request started.", **audit)
    try:
        result = await run_call_notes_agent(submission, settings, client=client)
    except Exception as e:
        log_audit_action(subject, "FAILED_CALL_NOTES_AGENT", f"Call notes agent failed: {e}", **audit)
        raise
    log_audit_action(subject, "COMPLETED_CALL_NOTES_AGENT", "Call notes generated.", **audit)
    return result
