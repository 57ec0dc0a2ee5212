"""
Dictation session: one recording/editing cycle of the voice note page.

The session owns the audio buffer and the transcription text. Capture is
released on every way out of a recording: stop, cancel and failed
transcription.
"""

import logging
import threading
import time
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional

from config import log_event

STATUS_IDLE = "idle"
STATUS_RECORDING = "recording"
STATUS_PROCESSING = "processing"
STATUS_READY = "ready"

Transcriber = Callable[[bytes, Optional[str]], str]
Persister = Callable[[str], Dict]


class SessionError(RuntimeError):
    """Raised when an operation does not fit the session's current state."""


class DictationSession:
    """Recording buffer, status and editable text of one dictation."""

    def __init__(self, session_id: Optional[str] = None):
        self.id = session_id or str(uuid.uuid4())[:8]
        self.status = STATUS_IDLE
        self.transcription = ""
        self.created_at = datetime.now().isoformat()
        self.last_active = time.monotonic()
        self._chunks: List[bytes] = []
        self._recording = False
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def buffered_bytes(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)

    def idle_seconds(self, now: Optional[float] = None) -> float:
        return (now if now is not None else time.monotonic()) - self.last_active

    def _touch(self):
        self.last_active = time.monotonic()

    def _release_capture(self):
        self._recording = False

    def start(self):
        with self._lock:
            if self._recording:
                raise SessionError("recording_already_running")
            if self.status == STATUS_PROCESSING:
                raise SessionError("transcription_running")
            self._touch()
            self._chunks = []
            self._recording = True
            self.status = STATUS_RECORDING
        log_event(logging.INFO, "session_recording_started", session=self.id)

    def add_chunk(self, data: bytes) -> int:
        """Append recorded audio. Returns the number of buffered bytes."""
        with self._lock:
            if not self._recording:
                raise SessionError("not_recording")
            self._touch()
            if data:
                self._chunks.append(data)
            return self.buffered_bytes

    def stop(self, transcribe: Transcriber, prompt: Optional[str] = None) -> Optional[str]:
        """
        Stop capturing and transcribe the buffered audio.
        Audio is kept when transcription fails so that calling stop again
        retries it.
        """
        with self._lock:
            if self.status == STATUS_PROCESSING:
                raise SessionError("transcription_running")
            self._touch()
            was_recording = self._recording
            self._release_capture()
            if not self._chunks:
                if not was_recording:
                    raise SessionError("no_audio")
                self.status = STATUS_IDLE
                log_event(logging.INFO, "session_stopped_empty", session=self.id)
                return None
            audio = b"".join(self._chunks)
            self.status = STATUS_PROCESSING

        try:
            text = transcribe(audio, prompt)
        except Exception:
            with self._lock:
                self.status = STATUS_IDLE
            log_event(logging.ERROR, "session_transcription_failed", session=self.id, bytes=len(audio))
            raise

        with self._lock:
            previous = self.transcription.strip()
            self.transcription = f"{previous} {text}" if previous else text
            self._chunks = []
            self.status = STATUS_READY
        log_event(logging.INFO, "session_transcribed", session=self.id, chars=len(text))
        return text

    def cancel(self):
        with self._lock:
            self._touch()
            self._release_capture()
            self._chunks = []
            self.status = STATUS_IDLE
        log_event(logging.INFO, "session_cancelled", session=self.id)

    def update_text(self, text: str):
        with self._lock:
            self._touch()
            self.transcription = text or ""

    def reset(self):
        with self._lock:
            self._touch()
            self._release_capture()
            self._chunks = []
            self.transcription = ""
            self.status = STATUS_IDLE

    def save(self, persist: Persister) -> Dict:
        """Hand the text to persist; the session is reset only on success."""
        text = self.transcription
        if not text.strip():
            raise SessionError("Kein Text zum Speichern vorhanden")
        result = persist(text)
        self.reset()
        log_event(logging.INFO, "session_saved", session=self.id, chars=len(text))
        return result

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "status": self.status,
            "recording": self._recording,
            "transcription": self.transcription,
            "buffered_bytes": self.buffered_bytes,
            "created_at": self.created_at,
            "idle_seconds": round(self.idle_seconds(), 1),
        }
