import logging
from typing import Optional

import httpx

from autonotes.utils.config import AgentSettings

from .extractors import to_display_string
from .grading import derive_health_status, score_from_grade, status_from_grade
from .maistro_client import AgentParams, call_maistro
from .models import AgentRawResponse, FinancialHealthInput, FinancialHealthReport, VariableMap
from .resolver import candidates, collect_unique_list, pick_first_number, pick_first_string
from .variables import (
    extract_json_object_from_answer,
    extract_variables,
    normalize_record,
    normalize_variable_keys,
)

logger = logging.getLogger(__name__)

FINANCE_USER_ID = "FinanceUser"
MISSING_SUMMARY = "NeuralSeek did not return a summary."
MISSING_STRENGTHS = "The agent did not highlight any strengths."
MISSING_RISKS = "The agent did not flag any risks."
MISSING_RECOMMENDATIONS = "The agent did not suggest any recommendations."


def build_financial_params(form: FinancialHealthInput) -> AgentParams:
    return [
        {"name": "companyName", "value": form.company_name},
        {"name": "reportingPeriod", "value": form.reporting_period or ""},
        {"name": "balanceSheet", "value": form.balance_sheet},
        {"name": "incomeStatement", "value": form.income_statement},
        {"name": "cashflowStatement", "value": form.cashflow_statement},
    ]


def merge_response_variables(raw: AgentRawResponse) -> VariableMap:
    """
    Explicit variables take precedence; an object recovered from the answer
    text only fills keys the variables do not already carry.
    """
    merged = normalize_variable_keys(extract_variables(raw))
    recovered = extract_json_object_from_answer(raw.answer)
    if recovered:
        for key, value in normalize_variable_keys(recovered).items():
            merged.setdefault(key, value)
    return merged


def _nested(variables: Optional[VariableMap], *keys: str) -> Optional[VariableMap]:
    for value in candidates(variables, *keys):
        record = normalize_record(value)
        if record is not None:
            return record
    return None


def _first_display(record: Optional[VariableMap], *keys: str) -> Optional[str]:
    for value in candidates(record, *keys):
        display = to_display_string(value)
        if display:
            return display
    return None


def build_financial_health_report(form: FinancialHealthInput, raw: AgentRawResponse) -> FinancialHealthReport:
    """Resolve a typed health report from loosely structured agent output."""
    variables = merge_response_variables(raw)
    key_ratios = _nested(variables, "keyRatios", "key_ratios")
    insights = _nested(variables, "optionalInsights", "optional_insights", "insights")
    future_plan = _nested(insights, "futurePlan", "future_plan") or _nested(variables, "futurePlan", "future_plan")

    grade = pick_first_string(*candidates(variables, "healthGrade", "grade"))
    score = pick_first_number(*candidates(variables, "healthScore", "overallHealthScore", "score"))
    if score is None:
        score = score_from_grade(grade)

    summary = pick_first_string(
        *candidates(variables, "healthSummary", "summary", "overview", "analysis"),
        raw.answer,
    ) or MISSING_SUMMARY

    strengths = collect_unique_list(
        *candidates(variables, "strengths", "highlights", "positives"),
        *candidates(key_ratios, "strengths"),
        *candidates(insights, "strengths"),
    )
    risks = collect_unique_list(
        *candidates(variables, "risks", "riskAlerts", "concerns", "weaknesses"),
        *candidates(insights, "financialRedFlags", "redFlags"),
    )
    recommendations = collect_unique_list(
        *candidates(variables, "recommendations", "improvementActions", "nextSteps"),
        *candidates(insights, "recommendations"),
        *candidates(future_plan, "shortTermGoals", "mediumTermGoals", "longTermGoals"),
        *candidates(future_plan, "short_term_goals", "medium_term_goals", "long_term_goals"),
    )

    explicit_status = pick_first_string(*candidates(variables, "healthStatus", "status", "financialHealth"))
    status = derive_health_status(score, explicit_status or status_from_grade(grade))

    liquidity_ratio = _first_display(key_ratios, "currentRatio", "quickRatio")
    profitability_ratio = _first_display(key_ratios, "netProfitMargin", "operatingMargin", "ebitdaMargin")
    runway_ratio = _first_display(key_ratios, "freeCashFlow") or _first_display(insights, "runwaySignal")

    liquidity_signal = pick_first_string(*candidates(variables, "liquiditySignal", "liquidity", "cash"))
    if not liquidity_signal and liquidity_ratio:
        liquidity_signal = f"Current ratio {liquidity_ratio}"
    profitability_signal = pick_first_string(*candidates(variables, "profitabilitySignal", "profitability", "marginTrend"))
    if not profitability_signal and profitability_ratio:
        profitability_signal = f"Profitability {profitability_ratio}"
    runway_signal = pick_first_string(*candidates(variables, "runwaySignal", "cashRunway", "burn"))
    if not runway_signal and runway_ratio:
        runway_signal = f"Free cash flow {runway_ratio}"

    return FinancialHealthReport(
        company_name=form.company_name,
        reporting_period=form.reporting_period,
        summary=summary,
        status=status,
        score=score if score is not None else 0.0,
        strengths=strengths or [MISSING_STRENGTHS],
        risks=risks or [MISSING_RISKS],
        recommendations=recommendations or [MISSING_RECOMMENDATIONS],
        liquidity_signal=liquidity_signal,
        profitability_signal=profitability_signal,
        runway_signal=runway_signal,
        raw_answer=raw.answer,
    )


async def run_financial_health_agent(
    form: FinancialHealthInput,
    settings: AgentSettings,
    client: Optional[httpx.AsyncClient] = None,
) -> FinancialHealthReport:
    raw = await call_maistro(
        settings,
        settings.financial_agent,
        build_financial_params(form),
        user_id=form.company_name or FINANCE_USER_ID,
        client=client,
    )
    report = build_financial_health_report(form, raw)
    logger.info(f"Financial health for {form.company_name}: {report.status} ({report.score:.2f})")
    return report
