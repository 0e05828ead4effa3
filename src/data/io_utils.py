"""
Shared I/O utilities for provider frames and uploaded import files.

Key Functions:
- providers_to_frame: Build the search DataFrame from Provider records
- detect_file_format: Determine import file format from its name
- load_import_records: Parse an uploaded CSV or JSON file into row dicts
- load_sample_providers: Demo directory used in offline mode

Supported Formats:
- CSV (.csv) - header row, every value read as a string
- JSON (.json) - an array of objects, or a single object
- In-memory buffers (BytesIO, bytes, memoryview, bytearray) and text
"""

from __future__ import annotations

import json
import logging
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from src.data.models import Provider, Schedule, record_from_dict, record_to_dict

logger = logging.getLogger(__name__)

SAMPLE_PROVIDERS_PATH = Path(__file__).resolve().parents[2] / "data" / "sample_providers.json"

PROVIDER_COLUMNS = list(Provider.__dataclass_fields__)
SCHEDULE_COLUMNS = ["day", "start_time", "end_time", "is_active"]
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def providers_to_frame(providers: List[Provider]) -> pd.DataFrame:
    """One row per provider, snake_case columns, positional RangeIndex.

    The index is the provider's position in ``providers`` so filtered or
    sorted frames can be mapped back to the original records.
    """
    rows = [record_to_dict(p) for p in providers]
    return pd.DataFrame(rows, columns=PROVIDER_COLUMNS)


def frame_to_providers(df: pd.DataFrame, providers: List[Provider]) -> List[Provider]:
    return [providers[i] for i in df.index]


def schedules_to_frame(schedules: List[Schedule]) -> pd.DataFrame:
    """Opening hours as an editable table with day names."""
    rows = [
        {
            "day": DAY_NAMES[s.day_of_week] if 0 <= s.day_of_week < len(DAY_NAMES) else str(s.day_of_week),
            "start_time": s.start_time,
            "end_time": s.end_time,
            "is_active": s.is_active,
        }
        for s in schedules
    ]
    return pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)


def _cell_text(value: Any) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def frame_to_schedules(df: pd.DataFrame) -> List[Schedule]:
    """Schedules from an edited table; rows without a day are skipped.

    Raises:
        ValueError: for a day that is not a weekday name
    """
    schedules = []
    for row in df.to_dict("records"):
        day = _cell_text(row.get("day")).title()
        if not day:
            continue
        if day not in DAY_NAMES:
            raise ValueError(f"Unknown day: {day}")
        is_active = row.get("is_active")
        schedules.append(
            Schedule(
                day_of_week=DAY_NAMES.index(day),
                start_time=_cell_text(row.get("start_time")),
                end_time=_cell_text(row.get("end_time")),
                is_active=True if is_active is None or pd.isna(is_active) else bool(is_active),
            )
        )
    return schedules


def detect_file_format(filename: Optional[str] = None) -> Optional[str]:
    """Return 'csv', 'json' or None for an import file name."""
    if not filename:
        return None
    fname_lower = filename.lower()
    if fname_lower.endswith(".csv"):
        return "csv"
    if fname_lower.endswith(".json"):
        return "json"
    return None


def _to_text(raw_input: Union[str, bytes, BytesIO, Any]) -> str:
    if isinstance(raw_input, str):
        return raw_input
    if isinstance(raw_input, BytesIO):
        data = raw_input.getvalue()
    elif isinstance(raw_input, (bytes, bytearray, memoryview)):
        data = bytes(raw_input)
    elif hasattr(raw_input, "getvalue"):
        # Streamlit UploadedFile
        data = raw_input.getvalue()
    else:
        raise TypeError(f"Unsupported input type: {type(raw_input).__name__}")
    return data.decode("utf-8-sig")


def _csv_records(text: str) -> List[Dict[str, str]]:
    if not text.strip():
        return []
    df = pd.read_csv(StringIO(text), dtype=str, keep_default_na=False, skip_blank_lines=True)
    df.columns = df.columns.str.strip()
    records = []
    for row in df.to_dict(orient="records"):
        values = {str(k): ("" if v is None else str(v).strip()) for k, v in row.items()}
        if any(values.values()):
            records.append(values)
    return records


def _json_records(text: str) -> List[Dict[str, Any]]:
    payload = json.loads(text)
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError("JSON import must be an array of objects")
    records = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"JSON import item {index + 1} is not an object")
        records.append(item)
    return records


def load_import_records(raw_input: Union[str, bytes, BytesIO, Any], *, filename: str) -> List[Dict[str, Any]]:
    """Parse an uploaded provider file into one dict per row.

    Args:
        raw_input: File contents (text, bytes, buffer or Streamlit upload)
        filename: Name of the uploaded file; its extension picks the parser

    Returns:
        List of row dicts in file order; blank CSV lines are skipped

    Raises:
        ValueError: If the format is unsupported or the file cannot be parsed
        TypeError: If the input type is not supported
    """
    format_type = detect_file_format(filename)
    if format_type is None:
        raise ValueError("Unsupported file format. Please upload a CSV or JSON file.")

    logger.info(f"Loading import file {filename} ({format_type})")
    text = _to_text(raw_input)
    try:
        if format_type == "csv":
            return _csv_records(text)
        return _json_records(text)
    except (json.JSONDecodeError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse {filename}: {e}") from e


def load_sample_providers(path: Optional[Path] = None) -> List[Provider]:
    """Load the bundled demo directory (offline mode)."""
    path = path or SAMPLE_PROVIDERS_PATH
    if not path.exists():
        logger.warning(f"Sample provider file not found: {path}")
        return []
    with open(path, encoding="utf-8") as fh:
        payload = json.load(fh)
    return [record_from_dict(Provider, item) for item in payload]
