"""
FastAPI backend for AutoNotes.
Exposes call-note generation, financial health scoring and statement
conversion to the React frontend.
"""
import os
import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from autonotes.agents.models import (
    CallAgentResult,
    FinancialHealthInput,
    FinancialHealthReport,
    TranscriptSubmission,
)
from autonotes.agents.router import generate_financial_report, process_transcript
from autonotes.utils.config import AgentSettings
from autonotes.utils.error_handler import (
    ConfigurationMissingError,
    SpreadsheetConversionError,
    UpstreamRequestError,
)
from autonotes.utils.logging import setup_logger
from autonotes.utils.spreadsheet import is_spreadsheet, spreadsheet_to_json_string

# JSON handlers on the package logger cover every autonotes.* module
setup_logger("autonotes")
logger = logging.getLogger(__name__)

app = FastAPI(title="AutoNotes API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv(
        "AUTONOTES_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    ).split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or incomplete request bodies are client errors (400), like the field checks below."""
    logger.warning(f"Rejected request to {request.url.path}: {len(exc.errors())} validation error(s)")
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@lru_cache(maxsize=1)
def get_settings() -> AgentSettings:
    """Settings are read once per process; tests override this dependency."""
    return AgentSettings.from_env()


@app.get("/api/health")
def health(settings: AgentSettings = Depends(get_settings)):
    return {
        "status": "ok",
        "callNotesAgent": settings.is_call_notes_configured,
        "financialAgent": settings.is_financial_configured,
        "financialEngine": "NeuralSeek" if settings.is_financial_configured else "Local heuristics",
    }


@app.post("/api/call-notes", response_model=CallAgentResult)
async def create_call_notes(
    submission: TranscriptSubmission,
    settings: AgentSettings = Depends(get_settings),
):
    if not submission.transcript.strip():
        raise HTTPException(status_code=400, detail="Paste a transcript to process.")
    if not (submission.metadata.title or "").strip():
        raise HTTPException(status_code=400, detail="Give this call a title so you can find it later.")

    try:
        return await process_transcript(submission, settings)
    except ConfigurationMissingError as e:
        logger.error(f"Call notes agent unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except UpstreamRequestError as e:
        logger.error(f"Call notes agent error: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/api/financial-health", response_model=FinancialHealthReport)
async def create_financial_health(
    form: FinancialHealthInput,
    settings: AgentSettings = Depends(get_settings),
):
    if not form.company_name.strip():
        raise HTTPException(status_code=400, detail="Add your company name so we can tag the report.")
    if not (form.balance_sheet and form.income_statement and form.cashflow_statement):
        raise HTTPException(
            status_code=400,
            detail="Upload the balance sheet, income statement, and cash flow Excel workbooks.",
        )

    try:
        return await generate_financial_report(form, settings)
    except ConfigurationMissingError as e:
        logger.error(f"Financial agent unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except UpstreamRequestError as e:
        logger.error(f"Financial agent error: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/api/statements/convert")
async def convert_statement(file: UploadFile = File(...)):
    """Convert an uploaded Excel/CSV export into the JSON statement text."""
    file_name = file.filename or ""
    if not is_spreadsheet(file_name, file.content_type):
        raise HTTPException(status_code=415, detail="Upload Excel exports (.xlsx or .xls) from your finance system.")

    content = await file.read()
    try:
        statement = spreadsheet_to_json_string(content, file_name)
    except SpreadsheetConversionError as e:
        logger.error(f"Spreadsheet conversion failed for {file_name}: {e}")
        raise HTTPException(
            status_code=422,
            detail="We could not parse that spreadsheet. Export a clean .xlsx and re-upload.",
        )

    return {"fileName": file_name, "statement": statement}
