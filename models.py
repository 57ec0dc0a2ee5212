"""
Data structures (dataclasses) for Voice Notes.
"""

from dataclasses import dataclass


@dataclass
class NotionPage:
    """A recently edited Notion page, as handed to the glossary builder."""
    id: str
    title: str
    last_edited: str  # ISO-8601, as returned by Notion

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "lastEdited": self.last_edited}


@dataclass(frozen=True)
class GlossaryPrompt:
    """Size-bounded transcription hint built from page titles."""
    text: str
    included_count: int

    def to_dict(self) -> dict:
        return {
            "prompt": self.text,
            "titlesIncluded": self.included_count,
            "totalCharacters": len(self.text),
        }
