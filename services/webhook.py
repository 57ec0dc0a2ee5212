"""
Note persistence through the storage webhook.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import requests

import config
from config import log_event


class PersistenceError(RuntimeError):
    """Raised when the webhook did not accept a note."""


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def save_note(text: str, timestamp: Optional[str] = None, webhook_url: Optional[str] = None) -> Dict:
    """POST a note to the webhook. Raises PersistenceError on any failure."""
    if not text or not text.strip():
        raise ValueError("Kein Text zum Speichern vorhanden")

    webhook_url = webhook_url or config.NOTE_WEBHOOK_URL
    if not webhook_url:
        raise PersistenceError("NOTE_WEBHOOK_URL not configured")

    timestamp = timestamp or utc_timestamp()
    try:
        resp = requests.post(
            webhook_url,
            json={"text": text, "timestamp": timestamp},
            timeout=config.HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        log_event(logging.ERROR, "note_save_failed", error=str(e))
        raise PersistenceError("Webhook request failed") from e

    if not resp.ok:
        log_event(logging.ERROR, "note_save_rejected", status=resp.status_code)
        raise PersistenceError(f"Webhook returned {resp.status_code}")

    log_event(logging.INFO, "note_saved", chars=len(text), timestamp=timestamp)
    return {"status": "saved", "timestamp": timestamp}
