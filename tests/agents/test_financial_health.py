import json

import pytest

from autonotes.agents.financial_health import (
    MISSING_RISKS,
    MISSING_SUMMARY,
    build_financial_health_report,
    build_financial_params,
    merge_response_variables,
)
from autonotes.agents.models import AgentRawResponse, FinancialHealthInput


@pytest.fixture
def form():
    return FinancialHealthInput(
        company_name="Acme Corp",
        reporting_period="FY2024",
        balance_sheet="{}",
        income_statement="{}",
        cashflow_statement="{}",
    )


def test_financial_params(form):
    params = build_financial_params(form)
    assert [p["name"] for p in params] == [
        "companyName", "reportingPeriod", "balanceSheet", "incomeStatement", "cashflowStatement",
    ]
    assert params[1]["value"] == "FY2024"


def test_explicit_variables_win_over_answer_json():
    raw = AgentRawResponse.from_payload({
        "answer": json.dumps({"summary": "from answer", "risks": ["Leverage"]}),
        "variables": {"Summary": "from variables"},
    })
    merged = merge_response_variables(raw)
    assert merged["summary"] == "from variables"
    assert merged["risks"] == ["Leverage"]


def test_report_from_nested_answer_json(form):
    answer = "```json\n" + json.dumps({
        "healthGrade": "B+",
        "healthSummary": "Solid quarter with improving margins.",
        "strengths": ["Recurring revenue"],
        "keyRatios": {"CurrentRatio": 1.8, "netProfitMargin": "12%", "strengths": "Low leverage"},
        "optionalInsights": {
            "financialRedFlags": ["Customer concentration"],
            "futurePlan": {
                "shortTermGoals": ["Renegotiate vendor terms"],
                "longTermGoals": "Expand to EU",
            },
        },
    }) + "\n```"
    report = build_financial_health_report(form, AgentRawResponse.from_payload({"answer": answer}))

    assert report.score == pytest.approx(0.82)
    assert report.status == "Stable"
    assert report.summary == "Solid quarter with improving margins."
    assert report.strengths == ["Recurring revenue", "Low leverage"]
    assert report.risks == ["Customer concentration"]
    assert report.recommendations == ["Renegotiate vendor terms", "Expand to EU"]
    assert report.liquidity_signal == "Current ratio 1.8"
    assert report.profitability_signal == "Profitability 12%"
    assert report.runway_signal is None
    assert report.raw_answer == answer


def test_explicit_score_beats_grade_and_drives_status(form):
    raw = AgentRawResponse.from_payload({
        "variables": {"grade": "A", "healthScore": "30%", "runwaySignal": "18 months"},
    })
    report = build_financial_health_report(form, raw)

    assert report.score == pytest.approx(0.3)
    # Grade still decides the status when no explicit status is present
    assert report.status == "Strong"
    assert report.runway_signal == "18 months"


def test_status_from_score_thresholds(form):
    raw = AgentRawResponse.from_payload({"variables": {"overallHealthScore": 0.6}})
    assert build_financial_health_report(form, raw).status == "Stable"


def test_explicit_status_passthrough(form):
    raw = AgentRawResponse.from_payload({"variables": {"healthStatus": "Watch", "score": 0.9}})
    assert build_financial_health_report(form, raw).status == "Watch"


def test_empty_response_uses_fallbacks(form):
    report = build_financial_health_report(form, AgentRawResponse())

    assert report.summary == MISSING_SUMMARY
    assert report.status == "Unknown"
    assert report.score == 0
    assert report.risks == [MISSING_RISKS]
    assert len(report.strengths) == 1
    assert len(report.recommendations) == 1
    assert report.company_name == "Acme Corp"
    assert report.reporting_period == "FY2024"


def test_unknown_grade_has_no_score(form):
    raw = AgentRawResponse.from_payload({"variables": {"grade": "Z"}})
    report = build_financial_health_report(form, raw)
    assert report.score == 0
    assert report.status == "At Risk"


def test_huge_integer_values_are_ignored(form):
    payload = json.loads(
        '{"variables": {"healthScore": 1' + "0" * 400 + ', "keyRatios": {"currentRatio": 1' + "0" * 400 + '}}}'
    )
    report = build_financial_health_report(form, AgentRawResponse.from_payload(payload))

    assert report.score == 0
    assert report.status == "Unknown"
    assert report.liquidity_signal is None
