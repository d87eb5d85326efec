"""
models/hadith.py
----------------
Domain model for a canonical (normalized) hadith record.
"""

import uuid
from dataclasses import asdict, dataclass, field, fields
from typing import Optional


def new_hadith_id() -> str:
    """Generate a fresh internal ID (32 hex chars, safe inside /hadith_<id>)."""
    return uuid.uuid4().hex


@dataclass
class Hadith:
    """
    A search result, stored independently of the API's raw shape.

    Attributes:
        id: Internal ID, generated once and never reused.
        dorar_id: External ID from the Dorar API (upsert key when present).
        text: Cleaned free text.
        arabic_text: Cleaned and NFKC-normalized Arabic text.
        narrator: Narrator (rawi).
        source: Source label as reported by the API.
        book: Book name.
        chapter: Chapter (bab).
        hadith_number: Number within the book.
        grade: Normalized grade (صحيح، حسن، ضعيف، موضوع) or the raw label.
        topic: First non-empty topic-like field.
        keywords: Comma-joined, deduplicated keyword list.
        translation: Translation, if provided.
        explanation: Explanation (sharh), if provided.
        is_verified: True when the source is one of the canonical collections.
        search_count: Incremented on every direct lookup.
    """
    id: str = field(default_factory=new_hadith_id)
    dorar_id: Optional[str] = None
    text: str = ""
    arabic_text: str = ""
    narrator: str = ""
    source: str = ""
    book: str = ""
    chapter: str = ""
    hadith_number: Optional[str] = None
    grade: Optional[str] = None
    topic: Optional[str] = None
    keywords: str = ""
    translation: str = ""
    explanation: str = ""
    is_verified: bool = False
    search_count: int = 0

    def to_dict(self) -> dict:
        """JSON-safe representation (used by the cache)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Hadith":
        """Rebuild a Hadith from `to_dict` output, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def display_text(self) -> str:
        return self.arabic_text or self.text
