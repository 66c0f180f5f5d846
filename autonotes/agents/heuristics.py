import logging
import math
import re
from typing import Optional

from .grading import derive_health_status
from .models import FinancialHealthInput, FinancialHealthReport

logger = logging.getLogger(__name__)

LOCAL_ANSWER = "Generated locally from pasted statements."

REVENUE_KEYWORDS = ["total revenue", "revenue", "net sales"]
NET_INCOME_KEYWORDS = ["net income", "profit", "earnings"]
OPEX_KEYWORDS = ["operating expenses", "total operating expenses", "opex"]
CASH_KEYWORDS = ["cash and cash equivalents", "cash & equivalents", "cash balance", "cash"]
CURRENT_ASSETS_KEYWORDS = ["current assets", "total current assets"]
CURRENT_LIABILITIES_KEYWORDS = ["current liabilities", "total current liabilities"]
DEBT_KEYWORDS = ["total debt", "long-term debt", "debt"]
OPERATING_CASH_FLOW_KEYWORDS = ["operating cash flow", "cash from operations"]
FREE_CASH_FLOW_KEYWORDS = ["free cash flow"]

_CURRENCY_NOISE = re.compile(r"[$€£,]")
_NUMERIC_TOKEN = re.compile(r"-?\(?\d+(?:\.\d+)?\)?")
# Checked in order; only the first matching scale applies
_SCALES = [
    (re.compile(r"\b(billion|bn)\b"), 1_000_000_000),
    (re.compile(r"\b(million|mm|mn|millions)\b"), 1_000_000),
    (re.compile(r"\b(thousand|k|thousands)\b"), 1_000),
]


def split_lines(text: str) -> list[str]:
    lines = (line.strip() for line in re.split(r"\r?\n", text or ""))
    return [line for line in lines if line]


def extract_number_from_line(line: str) -> Optional[float]:
    """First number on a line, negated when parenthesized, scaled by a nearby unit word."""
    sanitized = _CURRENCY_NOISE.sub("", line)
    match = _NUMERIC_TOKEN.search(sanitized)
    if not match:
        return None

    raw = match.group(0)
    value = float(raw.replace("(", "").replace(")", ""))
    if "(" in raw and ")" in raw:
        value = -value
    if not math.isfinite(value):
        return None

    prefix = sanitized[:match.start()].lower()
    suffix = sanitized[match.end():].lower()
    context = f"{prefix} {suffix}"
    for pattern, multiplier in _SCALES:
        if pattern.search(context):
            value *= multiplier
            break

    return value if math.isfinite(value) else None


def find_metric_value(text: str, keywords: list[str]) -> Optional[float]:
    for line in split_lines(text):
        lower = line.lower()
        if any(keyword in lower for keyword in keywords):
            value = extract_number_from_line(line)
            if value is not None:
                return value
    return None


def clamp_score(value: float) -> float:
    return min(0.98, max(0.05, value))


def format_currency(value: float) -> str:
    magnitude = abs(value)
    divisor, suffix = 1, ""
    if magnitude >= 1_000_000_000:
        divisor, suffix = 1_000_000_000, "B"
    elif magnitude >= 1_000_000:
        divisor, suffix = 1_000_000, "M"
    elif magnitude >= 1_000:
        divisor, suffix = 1_000, "K"

    scaled = magnitude / divisor
    precision = 0 if scaled >= 100 else 1 if scaled >= 10 else 2
    sign = "-" if value < 0 else ""
    return f"{sign}${scaled:.{precision}f}{suffix}"


def estimate_runway_months(cash: Optional[float], monthly_burn: Optional[float]) -> Optional[float]:
    if not cash or not monthly_burn or monthly_burn <= 0:
        return None
    return cash / monthly_burn


def estimate_monthly_burn(
    operating_cash_flow: Optional[float],
    operating_expenses: Optional[float],
    free_cash_flow: Optional[float],
) -> Optional[float]:
    # Statement periods are treated as quarters for cash flows, years for opex
    if operating_cash_flow and operating_cash_flow < 0:
        return abs(operating_cash_flow) / 3
    if operating_expenses:
        return max(operating_expenses / 12, 1)
    if free_cash_flow and free_cash_flow < 0:
        return abs(free_cash_flow) / 3
    return None


def _score(net_income, operating_cash_flow, liquidity_ratio, runway_months, cash, total_debt) -> float:
    score = 0.5
    if net_income is not None:
        score += 0.15 if net_income > 0 else -0.15
    if operating_cash_flow is not None:
        score += 0.15 if operating_cash_flow > 0 else -0.15
    if liquidity_ratio is not None:
        if liquidity_ratio >= 1.5:
            score += 0.1
        elif liquidity_ratio < 1:
            score -= 0.1
    if runway_months is not None:
        if runway_months >= 12:
            score += 0.1
        elif runway_months < 6:
            score -= 0.1
    if cash is not None and total_debt is not None:
        score += 0.05 if cash > total_debt else -0.05
    return clamp_score(score)


def build_mock_financial_report(form: FinancialHealthInput) -> FinancialHealthReport:
    """
    Offline fallback when no financial agent is configured. A pure function
    of the three statement texts: identical input gives identical output.
    """
    balance = form.balance_sheet or ""
    income = form.income_statement or ""
    cashflow = form.cashflow_statement or ""

    revenue = find_metric_value(income, REVENUE_KEYWORDS)
    net_income = find_metric_value(income, NET_INCOME_KEYWORDS)
    operating_expenses = find_metric_value(income, OPEX_KEYWORDS)

    cash = find_metric_value(balance, CASH_KEYWORDS)
    current_assets = find_metric_value(balance, CURRENT_ASSETS_KEYWORDS)
    current_liabilities = find_metric_value(balance, CURRENT_LIABILITIES_KEYWORDS)
    total_debt = find_metric_value(balance, DEBT_KEYWORDS)

    operating_cash_flow = find_metric_value(cashflow, OPERATING_CASH_FLOW_KEYWORDS)
    free_cash_flow = find_metric_value(cashflow, FREE_CASH_FLOW_KEYWORDS)

    liquidity_ratio = current_assets / current_liabilities if current_assets and current_liabilities else None
    net_margin = net_income / revenue if revenue and net_income is not None else None
    monthly_burn = estimate_monthly_burn(operating_cash_flow, operating_expenses, free_cash_flow)
    runway_months = estimate_runway_months(cash, monthly_burn)

    score = _score(net_income, operating_cash_flow, liquidity_ratio, runway_months, cash, total_debt)

    strengths = []
    if net_income is not None and net_income > 0:
        strengths.append(f"Net income of {format_currency(net_income)} indicates profitability.")
    if net_margin is not None and net_margin > 0.15:
        strengths.append(f"Net margin of {net_margin * 100:.1f}% shows healthy leverage.")
    if liquidity_ratio is not None and liquidity_ratio >= 1.5:
        strengths.append(f"Current ratio at {liquidity_ratio:.1f}x reflects solid liquidity.")
    if operating_cash_flow is not None and operating_cash_flow > 0:
        strengths.append(f"Operations generated {format_currency(operating_cash_flow)} in cash.")
    if runway_months is not None and runway_months >= 12:
        strengths.append(f"Cash runway extends roughly {runway_months:.0f} months.")
    if not strengths:
        strengths.append("Statements look complete, enabling quick diagnostics even without AI output.")

    risks = []
    if net_income is not None and net_income < 0:
        risks.append(f"Net losses of {format_currency(net_income)} are pressuring profitability.")
    if net_margin is not None and net_margin < 0.05:
        risks.append("Net margin is thin, leaving little buffer for volatility.")
    if liquidity_ratio is not None and liquidity_ratio < 1:
        risks.append(f"Current ratio of {liquidity_ratio:.2f}x signals working-capital stress.")
    if operating_cash_flow is not None and operating_cash_flow < 0:
        risks.append(f"Operating cash burn of {format_currency(operating_cash_flow)} this period.")
    if runway_months is not None and runway_months < 6:
        risks.append(f"Cash runway is only {runway_months:.1f} months at current burn.")
    if total_debt is not None and cash is not None and total_debt > cash:
        risks.append("Debt exceeds cash, creating refinancing exposure.")
    if not risks:
        risks.append("No acute risks detected from the text provided.")

    recommendations = []
    if net_income is not None and net_income < 0:
        recommendations.append("Tighten expense controls or improve pricing to return to profitability.")
    if operating_cash_flow is not None and operating_cash_flow < 0:
        recommendations.append("Stabilize working capital to reduce operating cash burn.")
    if liquidity_ratio is not None and liquidity_ratio < 1.2:
        recommendations.append("Build short-term liquidity through credit facilities or slower spend.")
    if runway_months is not None and runway_months < 9:
        recommendations.append("Secure additional capital to extend runway beyond nine months.")
    if total_debt is not None and cash is not None and total_debt > cash * 1.2:
        recommendations.append("Evaluate refinancing or debt reduction options to lighten leverage.")
    if not recommendations:
        recommendations.append("Maintain current plan; monitor cash trends monthly to stay ahead of shifts.")

    company = form.company_name or "The company"
    summary_parts = []
    if net_income is not None:
        outcome = "net income" if net_income >= 0 else "a loss"
        on_revenue = f" on {format_currency(revenue)} of revenue" if revenue else ""
        summary_parts.append(f"{company} posted {outcome} of {format_currency(net_income)}{on_revenue}.")
    else:
        summary_parts.append(f"{company} financials were analyzed with local heuristics.")
    if liquidity_ratio is not None:
        summary_parts.append(f"Current ratio sits near {liquidity_ratio:.1f}x.")
    if operating_cash_flow is not None:
        summary_parts.append(
            "Operations generated positive cash."
            if operating_cash_flow >= 0
            else "Operations consumed cash this period."
        )
    if runway_months is not None:
        summary_parts.append(f"Estimated runway ~{runway_months:.0f} months.")

    if liquidity_ratio is not None:
        liquidity_signal = (
            f"Current ratio ~{liquidity_ratio:.2f}x"
            if liquidity_ratio >= 1
            else f"Current ratio under 1.0 ({liquidity_ratio:.2f}x)"
        )
    elif cash is not None:
        liquidity_signal = f"Cash balance around {format_currency(cash)}"
    else:
        liquidity_signal = None

    profitability_signal = None
    if net_income is not None:
        if net_margin:
            profitability_signal = f"Net margin {net_margin * 100:.1f}%"
        else:
            profitability_signal = f"Net {'income' if net_income >= 0 else 'loss'} {format_currency(net_income)}"

    runway_signal = None
    if runway_months is not None:
        runway_signal = (
            f"~{runway_months:.0f} months runway"
            if runway_months >= 12
            else f"Runway near {runway_months:.0f} months"
        )

    logger.info(
        "Local heuristics for %s: score=%.2f, liquidity=%s, runway=%s",
        company, score, liquidity_ratio, runway_months,
    )

    return FinancialHealthReport(
        company_name=form.company_name,
        reporting_period=form.reporting_period,
        summary=" ".join(summary_parts),
        status=derive_health_status(score),
        score=score,
        strengths=strengths,
        risks=risks,
        recommendations=recommendations,
        liquidity_signal=liquidity_signal,
        profitability_signal=profitability_signal,
        runway_signal=runway_signal,
        raw_answer=LOCAL_ANSWER,
    )
