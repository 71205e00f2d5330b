"""Structural parser: content mapping -> annotated :class:`Document`.

Also hosts the small text heuristics shared by several rules (word and token
counts, capitalized-phrase entity extraction, pronoun detection, lookback
windows).
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon, leading_word_regex, word_regex
from data_designer_croutonizer.models import Document, DocumentMetadata, Paragraph, Section

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_ENTITY_RE = re.compile(r"\b[A-Z][a-z]{1,}(?:\s+[A-Z][a-z]{1,})*\b")
_CAPITALIZED_WORD_RE = re.compile(r"[A-Z][a-z]+")

ANSWER_BOX_ID = "answer-box"
ANSWER_BOX_TITLE = "Answer Box"

# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def estimate_tokens(text: str, hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> int:
    """Approximate token count: ``ceil(words * tokens_per_word)``."""
    words = count_words(text)
    if not words:
        return 0
    # 10 * 1.3 is 13.000000000000002 in binary floating point
    return math.ceil(round(words * hp.tokens_per_word, 6))


# ---------------------------------------------------------------------------
# Paragraphs and summaries
# ---------------------------------------------------------------------------


def parse_paragraphs(text: str, hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> tuple[Paragraph, ...]:
    if not text:
        return ()
    chunks = [c.strip() for c in _PARAGRAPH_SPLIT_RE.split(text)]
    paragraphs: list[Paragraph] = []
    offset = 0
    for index, chunk in enumerate(c for c in chunks if c):
        found = text.find(chunk, offset)
        start = found if found >= 0 else offset
        end = start + len(chunk)
        paragraphs.append(Paragraph(
            index=index,
            text=chunk,
            word_count=count_words(chunk),
            token_count=estimate_tokens(chunk, hp),
            start_char=start,
            end_char=end,
        ))
        offset = end
    return tuple(paragraphs)


def detect_summary(paragraphs: tuple[Paragraph, ...], hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> bool:
    """True when the last paragraph is marked, or shaped, like a closing summary."""
    if not paragraphs:
        return False
    last = paragraphs[-1]
    if last.text.startswith(hp.summary_marker):
        return True
    return (
        hp.summary_min_words <= last.word_count <= hp.summary_max_words
        and _CAPITALIZED_WORD_RE.search(last.text) is not None
    )


def strip_summary_marker(text: str, hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> str:
    marker = re.escape(hp.summary_marker.rstrip(":").strip())
    return re.sub(rf"^{marker}:?\s*", "", text, flags=re.IGNORECASE)


# ---------------------------------------------------------------------------
# Entities and pronouns
# ---------------------------------------------------------------------------


def extract_entities(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> list[str]:
    """Capitalized word runs ("Google Search Console"), deduplicated in order of appearance."""
    if not text:
        return []
    stop = set(lexicon.entity_stopwords)
    seen: set[str] = set()
    entities: list[str] = []
    for m in _ENTITY_RE.finditer(text):
        phrase = m.group(0)
        if phrase in seen or phrase in stop:
            continue
        seen.add(phrase)
        entities.append(phrase)
    return entities


def extract_action_words(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> list[str]:
    found: list[str] = []
    for m in word_regex(lexicon.action_words).finditer(text or ""):
        word = m.group(0).lower()
        if word not in found:
            found.append(word)
    return found


def starts_with_pronoun(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    if not text:
        return False
    return leading_word_regex(lexicon.paragraph_start_pronouns).match(text.strip()) is not None


def find_entity_mentions(text: str, entities: Iterable[str]) -> list[str]:
    """Entities occurring (case-insensitive substring) in ``text``."""
    if not text:
        return []
    lowered = text.lower()
    return [e for e in entities if e.lower() in lowered]


def count_entity_mentions(text: str, entities: Iterable[str]) -> int:
    if not text:
        return 0
    return sum(
        len(re.findall(rf"\b{re.escape(e)}\b", text, flags=re.IGNORECASE))
        for e in entities
    )


def get_previous_tokens(section: Section, paragraph_index: int, token_limit: int = 150) -> list[str]:
    """Trailing ``token_limit`` whitespace tokens before ``paragraph_index`` in ``section``."""
    tokens: list[str] = []
    for para in section.paragraphs[:max(0, paragraph_index)]:
        tokens.extend(para.text.split())
    return tokens[-token_limit:] if token_limit > 0 else []


# ---------------------------------------------------------------------------
# Document assembly
# ---------------------------------------------------------------------------


def parse_section(
    section_id: str,
    level: int,
    title: str,
    text: str,
    is_answer_box: bool = False,
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
) -> Section:
    paragraphs = parse_paragraphs(text, hp)
    return Section(
        id=section_id,
        level=level,
        title=title,
        text=text,
        paragraphs=paragraphs,
        word_count=count_words(text),
        token_count=estimate_tokens(text, hp),
        has_summary=detect_summary(paragraphs, hp),
        is_answer_box=is_answer_box,
    )


def parse_document(
    content: object,
    hyperparameters: Hyperparameters | None = None,
) -> Document:
    """Build the annotated document model.

    Args:
        content: Mapping with ``title``, optional ``answerBox`` (or
            ``answer_box``) and ``sections`` as a list of ``{heading, content}``
            mappings. Sections missing either key are skipped.
        hyperparameters: Optional tuning overrides.

    Returns:
        A :class:`Document`. Malformed or empty input gives a document with no
        sections and zero counts; this function does not raise on bad shapes.
    """
    hp = hyperparameters or DEFAULT_HYPERPARAMETERS
    if not isinstance(content, Mapping):
        return Document()

    title = content.get("title")
    title = title if isinstance(title, str) else ""
    sections: list[Section] = []

    answer_box = content.get("answerBox", content.get("answer_box"))
    if isinstance(answer_box, str) and answer_box:
        sections.append(parse_section(ANSWER_BOX_ID, 1, ANSWER_BOX_TITLE, answer_box, True, hp))

    raw_sections = content.get("sections")
    if isinstance(raw_sections, (list, tuple)):
        for idx, raw in enumerate(raw_sections):
            if not isinstance(raw, Mapping):
                continue
            heading, body = raw.get("heading"), raw.get("content")
            if not (isinstance(heading, str) and heading and isinstance(body, str) and body):
                continue
            sections.append(parse_section(f"section-{idx}", 2, heading, body, False, hp))

    metadata = DocumentMetadata(
        total_words=sum(s.word_count for s in sections),
        total_tokens=sum(s.token_count for s in sections),
        section_count=len(sections),
    )
    return Document(title=title, sections=tuple(sections), metadata=metadata)
