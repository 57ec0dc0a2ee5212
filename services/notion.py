"""
Notion operations: recently edited pages for the glossary.
"""

import logging
from typing import Dict, Iterable, List, Optional

import requests

import config
from config import log_event, normalize_database_id
from models import NotionPage
from services.glossary import UNTITLED_PLACEHOLDER, is_placeholder_title


class NotionError(RuntimeError):
    """Raised when recent pages cannot be fetched from Notion."""


def extract_title(page: Dict) -> str:
    """Return the plain text of a page's title property."""
    properties = page.get("properties") or {}
    for prop in properties.values():
        if not isinstance(prop, dict) or prop.get("type") != "title":
            continue
        text = "".join(
            segment.get("plain_text") or ""
            for segment in prop.get("title") or []
            if isinstance(segment, dict)
        )
        if text.strip():
            return text
        break
    return UNTITLED_PLACEHOLDER


def parent_database_id(page: Dict) -> str:
    parent = page.get("parent") or {}
    return normalize_database_id(parent.get("database_id") or "")


def filter_pages(results: Iterable[Dict], excluded_ids: Iterable[str]) -> List[NotionPage]:
    """Drop pages from excluded databases and pages that were never named."""
    excluded = {normalize_database_id(i) for i in excluded_ids}
    pages = []

    for result in results:
        if parent_database_id(result) in excluded:
            continue
        title = extract_title(result)
        if is_placeholder_title(title):
            continue
        pages.append(NotionPage(
            id=result.get("id", ""),
            title=title,
            last_edited=result.get("last_edited_time", ""),
        ))

    return pages


def fetch_recent_pages(
    api_key: Optional[str] = None,
    excluded_ids: Optional[Iterable[str]] = None,
) -> List[NotionPage]:
    """Fetch the most recently edited pages, newest first."""
    api_key = api_key or config.NOTION_API_KEY
    if not api_key:
        raise NotionError("NOTION_API_KEY not configured")
    if excluded_ids is None:
        excluded_ids = config.excluded_database_ids()

    try:
        response = requests.post(
            config.NOTION_SEARCH_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": config.NOTION_VERSION,
                "Content-Type": "application/json",
            },
            json={
                "sort": {"direction": "descending", "timestamp": "last_edited_time"},
                "page_size": config.NOTION_PAGE_SIZE,
            },
            timeout=config.HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        log_event(logging.ERROR, "notion_request_failed", error=str(e))
        raise NotionError("Notion request failed") from e

    if not response.ok:
        log_event(logging.ERROR, "notion_api_error", status=response.status_code, body=response.text[:200])
        raise NotionError(f"Notion API returned {response.status_code}")

    results = response.json().get("results") or []
    pages = filter_pages(results, excluded_ids)
    log_event(logging.INFO, "notion_pages_fetched", results=len(results), pages=len(pages))
    return pages
