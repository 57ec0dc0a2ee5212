"""Services package for Voice Notes."""

from services.glossary import (
    PREFIX,
    MAX_LENGTH,
    SEPARATOR,
    PLACEHOLDER_TITLES,
    UNTITLED_PLACEHOLDER,
    build_glossary_prompt,
    is_placeholder_title,
)

from services.notion import (
    NotionError,
    fetch_recent_pages,
)

from services.ai import (
    TranscriptionError,
    CompletionError,
    transcribe_audio,
    complete_prompt,
)

from services.webhook import (
    PersistenceError,
    save_note,
)

from services.session import (
    SessionError,
    DictationSession,
)

__all__ = [
    # Glossary
    "PREFIX",
    "MAX_LENGTH",
    "SEPARATOR",
    "PLACEHOLDER_TITLES",
    "UNTITLED_PLACEHOLDER",
    "build_glossary_prompt",
    "is_placeholder_title",
    # Notion
    "NotionError",
    "fetch_recent_pages",
    # AI
    "TranscriptionError",
    "CompletionError",
    "transcribe_audio",
    "complete_prompt",
    # Webhook
    "PersistenceError",
    "save_note",
    # Session
    "SessionError",
    "DictationSession",
]
