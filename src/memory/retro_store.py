import os
import json
import logging
from typing import Optional, List

from schema.retro_models import RetroRecord
from common.data import MAX_FIELD_LENGTH, get_store_path

logger = logging.getLogger(__name__)

JSON_PATH = get_store_path()


def truncate_field(text: str, max_length: int = MAX_FIELD_LENGTH) -> str:
    """Cut text to the store's per-field character limit."""
    if max_length is None or max_length <= 0 or len(text) <= max_length:
        return text
    logger.info(f"Truncating retro text from {len(text)} to {max_length} characters")
    return text[:max_length]


def _load_json() -> dict:
    if not os.path.exists(JSON_PATH):
        return {}
    try:
        with open(JSON_PATH, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise OSError(f"Failed to read retro store {JSON_PATH}: {e}")


def _save_json(data: dict) -> None:
    directory = os.path.dirname(JSON_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)
    try:
        with open(JSON_PATH, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str, ensure_ascii=False)
    except OSError as e:
        raise OSError(f"Failed to write retro store {JSON_PATH}: {e}")


async def save_retro(record: RetroRecord, max_length: int = MAX_FIELD_LENGTH) -> RetroRecord:
    """Save a RetroRecord, truncating its text fields to max_length."""
    stored = record.model_copy(
        update={
            "good_text": truncate_field(record.good_text, max_length),
            "bad_text": truncate_field(record.bad_text, max_length),
        }
    )
    data = _load_json()
    data[stored.record_id] = stored.model_dump(mode="json")
    _save_json(data)
    logger.info(f"Saved {stored.period} {stored.period_number} retro as {stored.record_id}")
    return stored


async def get_retro(record_id: str) -> Optional[RetroRecord]:
    """Retrieve a RetroRecord by record_id."""
    data = _load_json()
    if record_id in data:
        return RetroRecord.model_validate(data[record_id])
    return None


async def list_retros(period: Optional[str] = None) -> List[RetroRecord]:
    """List stored retros, optionally for one period type, by period number."""
    data = _load_json()
    records = [
        RetroRecord.model_validate(d)
        for d in data.values()
        if period is None or d.get("period") == period
    ]
    return sorted(records, key=lambda r: (r.period, r.period_number))


async def delete_retro(record_id: str) -> None:
    """Delete a RetroRecord by record_id."""
    data = _load_json()
    if record_id in data:
        del data[record_id]
        _save_json(data)
