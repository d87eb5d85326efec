"""
services/normalizer.py
-----------------------
Turns one raw Dorar API object into a canonical Hadith.

The API is inconsistent about field names, so each target field has an
ordered list of candidate source fields; the first non-empty one wins.
"""

import re
import unicodedata
from typing import Any, Optional

from models.hadith import Hadith
from utils.errors import UpstreamBadResponseError

# Zero-width spaces/joiners, directional marks, word joiner, BOM.
_INVISIBLE_RE = re.compile(r"[\u200B-\u200F\u2060\uFEFF]")
_WHITESPACE_RE = re.compile(r"\s+")
_KEYWORD_SPLIT_RE = re.compile(r"[,،]")

GRADE_MAP: dict[str, str] = {
    "صحيح": "صحيح",
    "حسن": "حسن",
    "ضعيف": "ضعيف",
    "موضوع": "موضوع",
    "sahih": "صحيح",
    "saheeh": "صحيح",
    "hasan": "حسن",
    "hassan": "حسن",
    "daif": "ضعيف",
    "da'if": "ضعيف",
    "weak": "ضعيف",
    "mawdu": "موضوع",
    "mawdoo": "موضوع",
    "fabricated": "موضوع",
}

VERIFIED_SOURCES: tuple[str, ...] = (
    "صحيح البخاري",
    "صحيح مسلم",
    "سنن أبي داود",
    "جامع الترمذي",
    "سنن النسائي",
    "سنن ابن ماجه",
    "مسند أحمد",
    "موطأ مالك",
)


class FieldExtractor:
    """
    Prioritized-fallback lookup over a raw API object.

    Usage:
        fields = FieldExtractor(raw)
        narrator = fields.first("rawi", "narrator")
    """

    def __init__(self, raw: dict):
        self.raw = raw

    def first(self, *candidates: str) -> Optional[Any]:
        """Return the first candidate value that is not None/empty/blank."""
        for name in candidates:
            value = self.raw.get(name)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, (list, dict)) and not value:
                continue
            return value
        return None

    def text(self, *candidates: str) -> str:
        value = self.first(*candidates)
        return clean_text(value) if value is not None else ""

    def arabic(self, *candidates: str) -> str:
        value = self.first(*candidates)
        return clean_arabic_text(value) if value is not None else ""


# ── Text cleaning ─────────────────────────────────────────

def clean_text(value: Any) -> str:
    """Strip invisible characters, collapse whitespace runs and trim."""
    if value is None:
        return ""
    text = _INVISIBLE_RE.sub("", str(value))
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_arabic_text(value: Any) -> str:
    """`clean_text` followed by Unicode NFKC normalization."""
    return unicodedata.normalize("NFKC", clean_text(value))


def normalize_grade(grade: Any) -> Optional[str]:
    """
    Map a grade label onto one of the four canonical Arabic grades.

    Matching is case-insensitive. Unknown labels are returned trimmed;
    empty input yields None.
    """
    if grade is None:
        return None
    cleaned = clean_text(grade)
    if not cleaned:
        return None
    return GRADE_MAP.get(cleaned.lower(), cleaned)


def is_verified_source(source: Any) -> bool:
    """True when the source names one of the eight canonical collections."""
    cleaned = clean_text(source)
    return any(name in cleaned for name in VERIFIED_SOURCES)


def extract_keywords(raw: dict) -> str:
    """
    Build the keyword list: explicit keywords, then topic, then narrator.

    Returns:
        Comma-joined keywords, deduplicated, first occurrence kept.
    """
    keywords: list[str] = []

    explicit = raw.get("keywords")
    if isinstance(explicit, str):
        keywords.extend(_KEYWORD_SPLIT_RE.split(explicit))
    elif isinstance(explicit, (list, tuple)):
        keywords.extend(str(k) for k in explicit if k is not None)

    if raw.get("topic"):
        keywords.append(raw["topic"])

    narrator = FieldExtractor(raw).first("rawi", "narrator")
    if narrator:
        keywords.append(narrator)

    cleaned = [clean_text(k) for k in keywords]
    return ", ".join(dict.fromkeys(k for k in cleaned if k))


# ── Record normalization ──────────────────────────────────

def normalize_hadith(raw: Any) -> Optional[Hadith]:
    """
    Normalize one raw API element.

    Args:
        raw: One element of the API's JSON array.

    Returns:
        A new (unsaved) Hadith, or None when the element carries
        neither text nor Arabic text.

    Raises:
        UpstreamBadResponseError: If the element is not a JSON object.
    """
    if not isinstance(raw, dict):
        raise UpstreamBadResponseError(
            f"Expected a hadith object, got {type(raw).__name__}"
        )

    fields = FieldExtractor(raw)
    text = fields.text("hadith", "text")
    arabic_text = fields.arabic("hadith_ar", "arabic", "hadith")
    if not text and not arabic_text:
        return None

    source = fields.text("book", "source")

    return Hadith(
        dorar_id=fields.text("id") or None,
        text=text,
        arabic_text=arabic_text,
        narrator=fields.text("rawi", "narrator"),
        source=source,
        book=fields.text("book_name", "book"),
        chapter=fields.text("chapter", "bab"),
        hadith_number=fields.text("hadith_number", "number") or None,
        grade=normalize_grade(fields.first("grade", "hukm")),
        topic=fields.text("topic", "subject", "category", "bab", "chapter") or None,
        keywords=extract_keywords(raw),
        translation=fields.text("translation"),
        explanation=fields.text("explanation", "sharh"),
        is_verified=is_verified_source(source),
    )
