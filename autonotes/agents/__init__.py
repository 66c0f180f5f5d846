"""
Agent report builders and the local heuristic fallback.
"""

from .call_notes import build_call_agent_result, run_call_notes_agent
from .financial_health import build_financial_health_report, run_financial_health_agent
from .heuristics import build_mock_financial_report
from .router import generate_financial_report, process_transcript

__all__ = [
    "build_call_agent_result",
    "run_call_notes_agent",
    "build_financial_health_report",
    "run_financial_health_agent",
    "build_mock_financial_report",
    "generate_financial_report",
    "process_transcript",
]
