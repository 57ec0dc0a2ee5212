"""
Application state management.
Dictation sessions live in memory for the lifetime of the process.
"""

import logging
import time
from threading import Lock
from typing import Dict, List, Optional

from config import log_event
from services.session import DictationSession, STATUS_PROCESSING

# --- STATE CONTAINERS ---

# Active dictation sessions by id
SESSIONS: Dict[str, DictationSession] = {}

# Lock for thread-safe registry operations
SESSIONS_LOCK: Lock = Lock()


def prune_sessions(max_idle_seconds: float, now: Optional[float] = None) -> List[str]:
    """Drop sessions untouched for longer than max_idle_seconds. Returns their ids."""
    now = now if now is not None else time.monotonic()
    with SESSIONS_LOCK:
        stale = [
            session_id for session_id, session in SESSIONS.items()
            if session.status != STATUS_PROCESSING and session.idle_seconds(now) > max_idle_seconds
        ]
        for session_id in stale:
            del SESSIONS[session_id]

    if stale:
        log_event(logging.INFO, "sessions_pruned", count=len(stale), remaining=len(SESSIONS))
    return stale
