"""
Glossary prompt construction.

Recently edited page titles are packed into a short hint for Whisper so that
proper nouns (project names, people, places) are spelled the way the
workspace spells them. The result is bounded by MAX_LENGTH characters,
prefix included.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from models import GlossaryPrompt, NotionPage

PREFIX = "Glossar: "
MAX_LENGTH = 896
SEPARATOR = ", "
PLACEHOLDER_TITLES = ("unbenannte seite", "new page")
UNTITLED_PLACEHOLDER = "Unbenannte Seite"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def is_placeholder_title(title: str) -> bool:
    """True for titles that mean "this page was never named"."""
    return title.strip().lower() in PLACEHOLDER_TITLES


def _parse(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a last-edited value into an aware datetime.
    Accepts ISO-8601 strings (trailing "Z" included), datetimes and epoch
    seconds. Anything else maps to the oldest possible moment.
    """
    parsed = _parse(value)
    return parsed if parsed is not None else _OLDEST


def _recency_key(value: Any) -> Tuple[bool, datetime]:
    # Unparseable values rank below every real timestamp, year 1 included
    parsed = _parse(value)
    return (parsed is not None, parsed if parsed is not None else _OLDEST)


def normalize_item(raw: Any) -> NotionPage:
    """Coerce a page object or a JSON mapping into a NotionPage."""
    if isinstance(raw, NotionPage):
        page_id, title, last_edited = raw.id, raw.title, raw.last_edited
    elif isinstance(raw, Mapping):
        page_id = raw.get("id", "")
        title = raw.get("title")
        last_edited = raw.get("lastEdited", raw.get("last_edited"))
    else:
        page_id = getattr(raw, "id", "")
        title = getattr(raw, "title", None)
        last_edited = getattr(raw, "last_edited", None)

    if not isinstance(title, str) or not title.strip():
        title = UNTITLED_PLACEHOLDER
    return NotionPage(id=str(page_id or ""), title=title, last_edited=last_edited)


def build_glossary_prompt(items: Iterable[Any]) -> GlossaryPrompt:
    """
    Build the glossary prompt from titled items.

    Items are ordered newest first (stable for equal timestamps), placeholder
    titles are dropped, and titles are taken greedily until the first one
    that does not fit. That title ends the walk; later, shorter titles are
    not considered.
    """
    pages = [normalize_item(item) for item in items]
    pages.sort(key=lambda page: _recency_key(page.last_edited), reverse=True)

    selected: List[str] = []
    current_length = len(PREFIX)

    for page in pages:
        if is_placeholder_title(page.title):
            continue

        increment = len(page.title) if not selected else len(page.title) + len(SEPARATOR)
        if current_length + increment > MAX_LENGTH:
            break

        selected.append(page.title)
        current_length += increment

    return GlossaryPrompt(text=PREFIX + SEPARATOR.join(selected), included_count=len(selected))
