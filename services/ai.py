"""
AI operations: Groq Whisper transcription and Groq chat completion.
"""

import logging
from typing import Dict, Optional

from config import (
    log_event,
    groq_client,
    GLOSSARY_CHAT_MODEL,
    TRANSCRIPTION_LANGUAGE,
    WHISPER_MODEL,
)


class TranscriptionError(RuntimeError):
    """Raised when audio could not be transcribed."""


class CompletionError(RuntimeError):
    """Raised when the chat model did not answer."""


# --- AUDIO TRANSCRIPTION ---

def transcribe_audio(
    audio_data: bytes,
    filename: str = "audio.webm",
    model: Optional[str] = None,
    language: Optional[str] = None,
    prompt: Optional[str] = None,
) -> Dict:
    """
    Transcribe audio using Groq's Whisper API.
    The glossary prompt, when given, is passed through unchanged as the
    Whisper `prompt` hint.
    """
    if not groq_client:
        log_event(logging.WARNING, "groq_unavailable")
        raise TranscriptionError("GROQ_API_KEY not configured")
    if not audio_data:
        raise TranscriptionError("No audio data")

    model = model or WHISPER_MODEL
    language = language or TRANSCRIPTION_LANGUAGE
    kwargs = {
        "file": (filename, audio_data),
        "model": model,
        "language": language,
        "response_format": "json",
    }
    if prompt:
        kwargs["prompt"] = prompt
        log_event(logging.INFO, "transcription_glossary", chars=len(prompt))

    try:
        transcription = groq_client.audio.transcriptions.create(**kwargs)
    except Exception as e:
        log_event(logging.ERROR, "transcription_error", error=str(e))
        raise TranscriptionError("Groq transcription request failed") from e

    text = (getattr(transcription, "text", "") or "").strip()
    log_event(logging.INFO, "audio_transcribed", bytes=len(audio_data), chars=len(text), model=model)
    return {
        "text": text,
        "language": getattr(transcription, "language", None) or language,
    }


# --- CHAT COMPLETION ---

def complete_prompt(prompt: str) -> str:
    """Send a prompt to the Groq chat model and return its reply."""
    if not groq_client:
        log_event(logging.WARNING, "groq_unavailable")
        raise CompletionError("GROQ_API_KEY not configured")

    try:
        log_event(logging.INFO, "groq_chat_request", model=GLOSSARY_CHAT_MODEL, chars=len(prompt))
        response = groq_client.chat.completions.create(
            model=GLOSSARY_CHAT_MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=1024,
        )
    except Exception as e:
        log_event(logging.ERROR, "groq_chat_error", error=str(e))
        raise CompletionError("Groq chat request failed") from e

    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    return (choices[0].message.content or "").strip()
