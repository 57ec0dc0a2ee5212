"""
Configuration, constants, and service initialization.
"""

import os
import logging

from dotenv import load_dotenv

# --- LOAD ENV ---
load_dotenv()

# --- LOGGING ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("voice_notes")


def log_event(level: int, message: str, **data):
    """Lightweight structured logging helper."""
    try:
        serialized = " | ".join(f"{k}={v}" for k, v in data.items())
        logger.log(level, f"{message}{' | ' + serialized if serialized else ''}")
    except Exception:
        logger.log(level, message)


# --- CONSTANTS ---
WHISPER_MODEL = os.getenv("WHISPER_MODEL", "whisper-large-v3")
TRANSCRIPTION_LANGUAGE = os.getenv("TRANSCRIPTION_LANGUAGE", "de")
GLOSSARY_CHAT_MODEL = os.getenv("GLOSSARY_CHAT_MODEL", "llama-3.3-70b-versatile")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "15"))
SESSION_TTL_SECONDS = float(os.getenv("SESSION_TTL_SECONDS", "3600"))

NOTION_SEARCH_URL = "https://api.notion.com/v1/search"
NOTION_VERSION = "2022-06-28"
NOTION_PAGE_SIZE = 50

# Changelog, networking events and one further database never feed the glossary
DEFAULT_EXCLUDED_DATABASE_IDS = (
    "21677e415a0980c18637c1b85976ffbf",
    "2a677e415a098119a13ad2a78a457d28",
    "21677e415a09807caf5fe7a075cb3c66",
)

# --- API KEYS ---
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
NOTION_API_KEY = os.getenv("NOTION_API_KEY")
NOTE_WEBHOOK_URL = os.getenv("NOTE_WEBHOOK_URL")


def normalize_database_id(value: str) -> str:
    """Notion returns database ids both with and without dashes."""
    return (value or "").replace("-", "").strip().lower()


def excluded_database_ids() -> frozenset:
    """Database ids whose pages are left out of the glossary."""
    raw = os.getenv("NOTION_EXCLUDED_DATABASE_IDS")
    ids = raw.split(",") if raw else DEFAULT_EXCLUDED_DATABASE_IDS
    return frozenset(normalize_database_id(i) for i in ids if i.strip())


# --- INITIALIZE SERVICES ---

# Groq client for Whisper transcription and chat
groq_client = None
if GROQ_API_KEY:
    from groq import Groq
    groq_client = Groq(api_key=GROQ_API_KEY)
