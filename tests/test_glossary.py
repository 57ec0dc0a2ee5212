from datetime import datetime, timedelta, timezone

import pytest

from models import NotionPage
from services.glossary import (
    MAX_LENGTH,
    PREFIX,
    SEPARATOR,
    UNTITLED_PLACEHOLDER,
    build_glossary_prompt,
    is_placeholder_title,
    normalize_item,
    parse_timestamp,
)


def _page(title, minutes_ago):
    edited = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago)
    return {"id": title, "title": title, "lastEdited": edited.isoformat().replace("+00:00", "Z")}


def _titles(prompt):
    remainder = prompt.text[len(PREFIX):]
    return remainder.split(SEPARATOR) if remainder else []


def test_constants():
    assert PREFIX == "Glossar: "
    assert len(PREFIX) == 9
    assert MAX_LENGTH == 896


def test_empty_input():
    prompt = build_glossary_prompt([])
    assert prompt.text == "Glossar: "
    assert prompt.included_count == 0


def test_e2e_notion_titles():
    items = [
        _page("Projekt Apollo", 1),
        _page("New Page", 2),
        _page("Meeting Notizen", 3),
        _page("Unbenannte Seite", 4),
        _page("Budget 2025", 5),
    ]
    prompt = build_glossary_prompt(items)
    assert prompt.text == "Glossar: Projekt Apollo, Meeting Notizen, Budget 2025"
    assert prompt.included_count == 3


def test_sorts_newest_first():
    items = [
        {"title": "A", "lastEdited": 1},
        {"title": "B", "lastEdited": 3},
        {"title": "C", "lastEdited": 2},
    ]
    assert _titles(build_glossary_prompt(items)) == ["B", "C", "A"]


def test_equal_timestamps_keep_input_order():
    items = [
        {"title": "Zebra", "lastEdited": "2025-01-01T00:00:00Z"},
        {"title": "Alpha", "lastEdited": "2025-01-01T00:00:00Z"},
        {"title": "Mitte", "lastEdited": "2025-01-01T00:00:00Z"},
    ]
    assert _titles(build_glossary_prompt(items)) == ["Zebra", "Alpha", "Mitte"]


@pytest.mark.parametrize("placeholder", ["New Page", "new page", "Unbenannte Seite", "  UNBENANNTE SEITE  "])
def test_placeholder_titles_never_included(placeholder):
    items = [
        {"title": "Erste", "lastEdited": 3},
        {"title": placeholder, "lastEdited": 2},
        {"title": "Letzte", "lastEdited": 1},
    ]
    prompt = build_glossary_prompt(items)
    assert placeholder.strip().lower() not in prompt.text.lower()
    assert _titles(prompt) == ["Erste", "Letzte"]


def test_all_placeholders_gives_bare_prefix():
    items = [{"title": "New Page", "lastEdited": 2}, {"title": "unbenannte seite", "lastEdited": 1}]
    prompt = build_glossary_prompt(items)
    assert prompt.text == PREFIX
    assert prompt.included_count == 0


def test_greedy_stop_does_not_skip_ahead():
    # "c" * 3 would still fit after "a" * 880, but "b" * 50 ends the walk first
    items = [
        {"title": "a" * 880, "lastEdited": 3},
        {"title": "b" * 50, "lastEdited": 2},
        {"title": "c" * 3, "lastEdited": 1},
    ]
    prompt = build_glossary_prompt(items)
    assert prompt.included_count == 1
    assert prompt.text == PREFIX + "a" * 880


def test_greedy_stop_with_800_50_50():
    items = [
        {"title": "a" * 800, "lastEdited": 3},
        {"title": "b" * 50, "lastEdited": 2},
        {"title": "c" * 50, "lastEdited": 1},
    ]
    prompt = build_glossary_prompt(items)
    # 9 + 800 + 52 = 861 fits, a further 52 would reach 913
    assert prompt.included_count == 2
    assert "c" not in prompt.text


def test_first_title_too_long_is_not_truncated():
    items = [
        {"title": "x" * (MAX_LENGTH - len(PREFIX) + 1), "lastEdited": 2},
        {"title": "kurz", "lastEdited": 1},
    ]
    prompt = build_glossary_prompt(items)
    assert prompt.text == PREFIX
    assert prompt.included_count == 0


def test_title_filling_budget_exactly_fits():
    title = "y" * (MAX_LENGTH - len(PREFIX))
    prompt = build_glossary_prompt([{"title": title, "lastEdited": 1}])
    assert prompt.included_count == 1
    assert len(prompt.text) == MAX_LENGTH


def test_separator_counts_against_budget():
    first = "a" * 880
    # 9 + 880 + 2 + 5 = 896 fits, one more character does not
    fits = build_glossary_prompt([{"title": first, "lastEdited": 2}, {"title": "b" * 5, "lastEdited": 1}])
    assert fits.included_count == 2
    assert len(fits.text) == MAX_LENGTH

    overflows = build_glossary_prompt([{"title": first, "lastEdited": 2}, {"title": "b" * 6, "lastEdited": 1}])
    assert overflows.included_count == 1


def test_many_titles_stay_within_budget_and_count_matches():
    items = [{"title": f"Projekt Nummer {i}", "lastEdited": i} for i in range(200)]
    prompt = build_glossary_prompt(items)
    assert len(prompt.text) <= MAX_LENGTH
    assert prompt.text.startswith(PREFIX)
    assert 0 < prompt.included_count < 200
    assert len(_titles(prompt)) == prompt.included_count
    assert _titles(prompt)[0] == "Projekt Nummer 199"


def test_missing_title_is_dropped():
    items = [
        {"title": None, "lastEdited": 3},
        {"lastEdited": 2},
        {"title": "   ", "lastEdited": 1},
        {"title": "Vorhanden", "lastEdited": 0},
    ]
    prompt = build_glossary_prompt(items)
    assert prompt.text == "Glossar: Vorhanden"
    assert prompt.included_count == 1


def test_unparseable_timestamp_sorts_last():
    items = [
        {"title": "Kaputt", "lastEdited": "gestern"},
        {"title": "Fehlt"},
        {"title": "Neu", "lastEdited": "2025-06-01T08:00:00.000Z"},
    ]
    assert _titles(build_glossary_prompt(items)) == ["Neu", "Kaputt", "Fehlt"]


def test_accepts_page_objects():
    pages = [
        NotionPage(id="1", title="Alt", last_edited="2024-01-01T00:00:00Z"),
        NotionPage(id="2", title="Neu", last_edited="2025-01-01T00:00:00Z"),
    ]
    assert build_glossary_prompt(pages).text == "Glossar: Neu, Alt"


def test_does_not_mutate_input():
    items = [{"title": "A", "lastEdited": 1}, {"title": "B", "lastEdited": 2}]
    snapshot = [dict(item) for item in items]
    build_glossary_prompt(items)
    assert items == snapshot


def test_is_placeholder_title():
    assert is_placeholder_title(" New page ")
    assert is_placeholder_title("UNBENANNTE SEITE")
    assert not is_placeholder_title("New Pages")


def test_parse_timestamp_variants():
    utc = timezone.utc
    assert parse_timestamp("2025-01-01T10:00:00Z") == datetime(2025, 1, 1, 10, tzinfo=utc)
    assert parse_timestamp("2025-01-01T10:00:00") == datetime(2025, 1, 1, 10, tzinfo=utc)
    assert parse_timestamp("2025-01-01T12:00:00+02:00") == datetime(2025, 1, 1, 10, tzinfo=utc)
    assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=utc)
    assert parse_timestamp(None) < parse_timestamp(0)
    assert parse_timestamp("not a date") == parse_timestamp(None)


def test_normalize_item_substitutes_placeholder():
    page = normalize_item({"id": "abc", "lastEdited": "2025-01-01T00:00:00Z"})
    assert page.title == UNTITLED_PLACEHOLDER
    assert page.id == "abc"


def test_unparseable_timestamp_sorts_after_year_one():
    items = [
        {"title": "A", "lastEdited": "kaputt"},
        {"title": "B", "lastEdited": "0001-01-01T00:00:00+05:00"},
        {"title": "C", "lastEdited": "0001-01-01T00:00:00Z"},
    ]
    assert _titles(build_glossary_prompt(items)) == ["C", "B", "A"]
