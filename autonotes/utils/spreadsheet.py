import io
import json
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from autonotes.utils.error_handler import SpreadsheetConversionError

logger = logging.getLogger(__name__)

SPREADSHEET_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
}
SPREADSHEET_SUFFIXES = (".xlsx", ".xls", ".csv")


def is_spreadsheet(file_name: str, content_type: Optional[str] = None) -> bool:
    """Accept Excel MIME types or a spreadsheet file extension."""
    if content_type in SPREADSHEET_MIME_TYPES:
        return True
    return (file_name or "").lower().endswith(SPREADSHEET_SUFFIXES)


def _frame_to_rows(frame: pd.DataFrame) -> list[dict]:
    frame = frame.dropna(how="all")
    # Keep blank cells as null rather than NaN
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def spreadsheet_to_json_string(content: bytes, file_name: str) -> str:
    """
    Convert an uploaded workbook into the JSON statement text fed to the agents:
    {"fileName": ..., "sheets": {sheet_name: [row, ...]}}
    """
    buffer = io.BytesIO(content)
    try:
        if file_name.lower().endswith(".csv"):
            workbook = {Path(file_name).stem or "Sheet1": pd.read_csv(buffer)}
        else:
            engine = "xlrd" if file_name.lower().endswith(".xls") else "openpyxl"
            workbook = pd.read_excel(buffer, sheet_name=None, engine=engine)
    except Exception as e:
        logger.warning(f"Could not read spreadsheet {file_name}: {e}")
        raise SpreadsheetConversionError(f"Could not read spreadsheet {file_name}.") from e

    if not workbook:
        raise SpreadsheetConversionError("No sheets detected in uploaded workbook.")

    sheets = {str(name): _frame_to_rows(frame) for name, frame in workbook.items()}
    logger.info(f"Converted {file_name}: {len(sheets)} sheet(s)")

    return json.dumps({"fileName": file_name, "sheets": sheets}, default=str)
