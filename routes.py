"""
Flask routes for the Voice Notes API.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Blueprint, request, jsonify, render_template

import config
from config import log_event, groq_client
from state import SESSIONS, SESSIONS_LOCK, prune_sessions
from services.glossary import build_glossary_prompt
from services.notion import NotionError, fetch_recent_pages
from services.ai import CompletionError, TranscriptionError, transcribe_audio, complete_prompt
from services.webhook import PersistenceError, save_note
from services.session import DictationSession, SessionError

# Create blueprint
api = Blueprint('api', __name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _get_session(session_id: str) -> Optional[DictationSession]:
    with SESSIONS_LOCK:
        return SESSIONS.get(session_id)


def _session_not_found(session_id: str):
    log_event(logging.WARNING, "session_not_found", session=session_id)
    return jsonify({"error": "Sitzung nicht gefunden"}), 404


def _recent_glossary() -> Optional[str]:
    """Glossary from Notion for a transcription; missing Notion is not fatal."""
    try:
        pages = fetch_recent_pages()
    except NotionError as e:
        log_event(logging.WARNING, "glossary_skipped", error=str(e))
        return None
    glossary = build_glossary_prompt(pages)
    log_event(logging.INFO, "glossary_created", titles=glossary.included_count, chars=len(glossary.text))
    return glossary.text


# --- PAGE ROUTES ---

@api.route('/')
def index():
    """Serve the dictation page."""
    return render_template('index.html')


@api.route('/health')
def health():
    """Health check endpoint."""
    with SESSIONS_LOCK:
        session_count = len(SESSIONS)
    return jsonify({
        "status": "ok",
        "groq_available": groq_client is not None,
        "notion_configured": bool(config.NOTION_API_KEY),
        "webhook_configured": bool(config.NOTE_WEBHOOK_URL),
        "sessions": session_count,
    })


# --- NOTION & GLOSSARY ---

@api.route('/api/notion/recent-pages')
def recent_pages():
    """Recently edited pages plus the glossary built from them."""
    try:
        pages = fetch_recent_pages()
    except NotionError as e:
        log_event(logging.ERROR, "api_recent_pages_error", error=str(e))
        return jsonify({
            "error": "Failed to fetch Notion pages",
            "pages": [],
            "fetchedAt": _now_iso(),
        }), 500

    glossary = build_glossary_prompt(pages)
    log_event(logging.INFO, "glossary_created", titles=glossary.included_count, chars=len(glossary.text))
    return jsonify({
        "pages": [p.to_dict() for p in pages],
        "fetchedAt": _now_iso(),
        "glossary": glossary.to_dict(),
    })


@api.route('/api/glossary', methods=['POST'])
def create_glossary():
    """Build a glossary from posted pages and ask the chat model about it."""
    data = request.get_json(silent=True) or {}
    pages = data.get('pages')
    if not isinstance(pages, list):
        return jsonify({"error": "Invalid pages data"}), 400

    glossary = build_glossary_prompt(pages)
    log_event(logging.INFO, "glossary_created", titles=glossary.included_count, chars=len(glossary.text))

    try:
        reply = complete_prompt(glossary.text)
    except CompletionError as e:
        log_event(logging.ERROR, "api_glossary_error", error=str(e))
        return jsonify({"error": "Failed to create glossary"}), 500

    return jsonify({
        "glossary": glossary.text,
        "groqResponse": reply,
        "titlesIncluded": glossary.included_count,
        "totalCharacters": len(glossary.text),
    })


# --- TRANSCRIPTION & NOTES ---

@api.route('/api/transcribe', methods=['POST'])
def transcribe():
    """Transcribe an uploaded recording, optionally biased by a glossary."""
    audio_file = request.files.get('file')
    if audio_file is None:
        return jsonify({"error": "Keine Audio-Datei gefunden"}), 400

    audio_data = audio_file.read()
    log_event(logging.INFO, "api_transcribe", bytes=len(audio_data))
    try:
        result = transcribe_audio(
            audio_data,
            filename=audio_file.filename or "audio.webm",
            model=request.form.get('model') or None,
            language=request.form.get('language') or None,
            prompt=request.form.get('glossary') or None,
        )
    except TranscriptionError as e:
        log_event(logging.ERROR, "api_transcribe_error", error=str(e))
        return jsonify({"error": "Transkription fehlgeschlagen"}), 500

    return jsonify(result)


@api.route('/api/notes', methods=['POST'])
def save_text():
    """Forward edited text to the storage webhook."""
    data = request.get_json(silent=True) or {}
    text = data.get('text') or ''
    if not text.strip():
        return jsonify({"error": "Kein Text zum Speichern vorhanden"}), 400

    try:
        result = save_note(text)
    except PersistenceError as e:
        log_event(logging.ERROR, "api_notes_error", error=str(e))
        return jsonify({"error": "Speichern fehlgeschlagen. Bitte versuche es erneut."}), 502

    return jsonify(result)


# --- DICTATION SESSIONS ---

@api.route('/api/sessions', methods=['POST'])
def create_session():
    """Open a session and start recording right away."""
    prune_sessions(config.SESSION_TTL_SECONDS)
    session = DictationSession()
    session.start()
    with SESSIONS_LOCK:
        SESSIONS[session.id] = session
    log_event(logging.INFO, "api_session_created", session=session.id)
    return jsonify(session.to_dict()), 201


@api.route('/api/sessions/<session_id>', methods=['GET'])
def get_session(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found(session_id)
    return jsonify(session.to_dict())


@api.route('/api/sessions/<session_id>', methods=['DELETE'])
def delete_session(session_id):
    with SESSIONS_LOCK:
        session = SESSIONS.pop(session_id, None)
    if session is None:
        return _session_not_found(session_id)
    session.cancel()
    return jsonify({"status": "deleted", "id": session_id})


@api.route('/api/sessions/<session_id>/start', methods=['POST'])
def start_session(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found(session_id)
    try:
        session.start()
    except SessionError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify(session.to_dict())


@api.route('/api/sessions/<session_id>/audio', methods=['POST'])
def add_audio(session_id):
    """Append a recorded chunk (multipart `audio` field or raw body)."""
    session = _get_session(session_id)
    if session is None:
        return _session_not_found(session_id)

    upload = request.files.get('audio')
    data = upload.read() if upload is not None else request.get_data()
    try:
        buffered = session.add_chunk(data)
    except SessionError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"status": "ok", "buffered_bytes": buffered})


@api.route('/api/sessions/<session_id>/stop', methods=['POST'])
def stop_session(session_id):
    """Stop recording and transcribe; calling again after a failure retries."""
    session = _get_session(session_id)
    if session is None:
        return _session_not_found(session_id)

    data = request.get_json(silent=True) or {}
    glossary = data.get('glossary') or _recent_glossary()

    def _transcribe(audio: bytes, prompt: Optional[str]) -> str:
        return transcribe_audio(audio, prompt=prompt)["text"]

    try:
        text = session.stop(_transcribe, prompt=glossary)
    except SessionError as e:
        return jsonify({"error": str(e)}), 409
    except TranscriptionError as e:
        log_event(logging.ERROR, "api_session_stop_error", session=session_id, error=str(e))
        return jsonify({
            "error": "Transkription fehlgeschlagen. Bitte versuche es erneut.",
            "session": session.to_dict(),
        }), 502

    result = session.to_dict()
    result["text"] = text
    return jsonify(result)


@api.route('/api/sessions/<session_id>/cancel', methods=['POST'])
def cancel_session(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found(session_id)
    session.cancel()
    return jsonify(session.to_dict())


@api.route('/api/sessions/<session_id>/text', methods=['PUT'])
def edit_session_text(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found(session_id)
    data = request.get_json(silent=True) or {}
    text = data.get('text')
    if not isinstance(text, str):
        return jsonify({"error": "No text provided"}), 400
    session.update_text(text)
    return jsonify(session.to_dict())


@api.route('/api/sessions/<session_id>/save', methods=['POST'])
def save_session(session_id):
    session = _get_session(session_id)
    if session is None:
        return _session_not_found(session_id)

    try:
        result = session.save(save_note)
    except SessionError as e:
        return jsonify({"error": str(e)}), 400
    except PersistenceError as e:
        log_event(logging.ERROR, "api_session_save_error", session=session_id, error=str(e))
        return jsonify({
            "error": "Speichern fehlgeschlagen. Bitte versuche es erneut.",
            "session": session.to_dict(),
        }), 502

    result["session"] = session.to_dict()
    return jsonify(result)
