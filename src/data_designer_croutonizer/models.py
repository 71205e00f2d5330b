from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field, replace
from functools import singledispatch
from typing import Any, Literal

IssueType = Literal["error", "warning"]
Severity = Literal["blocking", "non-blocking"]
Status = Literal["errors", "warnings", "clean"]

# ---------------------------------------------------------------------------
# Rule identifiers and point budget
# ---------------------------------------------------------------------------

SECTION_ANCHORING = "sectionAnchoring"
ENTITY_PERSISTENCE = "entityPersistence"
CLAIM_EVIDENCE = "claimEvidence"
HEADER_SPECIFICITY = "headerSpecificity"
FACT_DENSITY = "factDensity"
FACT_QUALITY = "factQuality"

RULE_ORDER: tuple[str, ...] = (
    SECTION_ANCHORING,
    ENTITY_PERSISTENCE,
    CLAIM_EVIDENCE,
    HEADER_SPECIFICITY,
    FACT_DENSITY,
    FACT_QUALITY,
)

RULE_MAXIMA: Mapping[str, int] = {
    SECTION_ANCHORING: 20,
    ENTITY_PERSISTENCE: 20,
    CLAIM_EVIDENCE: 20,
    HEADER_SPECIFICITY: 15,
    FACT_DENSITY: 15,
    FACT_QUALITY: 10,
}

# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Paragraph:
    index: int
    text: str
    word_count: int
    token_count: int
    start_char: int
    end_char: int

    def to_payload(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class Section:
    id: str
    level: int
    title: str
    text: str
    paragraphs: tuple[Paragraph, ...]
    word_count: int
    token_count: int
    has_summary: bool
    is_answer_box: bool = False

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "level": self.level,
            "title": self.title,
            "text": self.text,
            "paragraphs": [p.to_payload() for p in self.paragraphs],
            "word_count": self.word_count,
            "token_count": self.token_count,
            "has_summary": self.has_summary,
            "isAnswerBox": self.is_answer_box,
        }


@dataclass(frozen=True)
class DocumentMetadata:
    total_words: int = 0
    total_tokens: int = 0
    section_count: int = 0

    def to_payload(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class Fact:
    id: str
    subject: str = ""
    predicate: str = ""
    object: str = ""
    object_type: str | None = None
    evidence_text: str | None = None
    source_section_id: str | None = None
    grounded: bool | None = None

    def to_payload(self) -> dict[str, object]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class Document:
    title: str = ""
    sections: tuple[Section, ...] = ()
    facts: tuple[Fact, ...] = ()
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @property
    def answer_box(self) -> Section | None:
        return next((s for s in self.sections if s.is_answer_box), None)

    @property
    def content_sections(self) -> tuple[Section, ...]:
        return tuple(s for s in self.sections if not s.is_answer_box)

    def with_facts(self, facts: object) -> Document:
        """Return a copy carrying ``facts`` (any shape accepted by :func:`normalize_facts`)."""
        return replace(self, facts=normalize_facts(facts))

    def to_payload(self) -> dict[str, object]:
        return {
            "title": self.title,
            "sections": [s.to_payload() for s in self.sections],
            "facts": [f.to_payload() for f in self.facts],
            "metadata": self.metadata.to_payload(),
        }


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Location:
    section_id: str | None = None
    paragraph_index: int | None = None
    char_range: tuple[int, int] | None = None
    fact_index: int | None = None
    fact_id: str | None = None
    field: str | None = None
    header: str | None = None
    fact: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload = {k: v for k, v in asdict(self).items() if v is not None}
        if "char_range" in payload:
            payload["char_range"] = list(payload["char_range"])
        return payload


@dataclass(frozen=True)
class Fix:
    type: str
    suggestion: str
    action: str
    instructions: str | None = None
    alternatives: tuple[str, ...] = ()
    candidates: tuple[str, ...] = ()
    fact_id: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"type": self.type, "suggestion": self.suggestion, "action": self.action}
        if self.instructions is not None:
            payload["instructions"] = self.instructions
        if self.alternatives:
            payload["alternatives"] = list(self.alternatives)
        if self.candidates:
            payload["candidates"] = list(self.candidates)
        if self.fact_id is not None:
            payload["fact_id"] = self.fact_id
        return payload


@dataclass(frozen=True)
class Issue:
    id: str
    rule: str
    type: IssueType
    severity: Severity
    location: Location
    message: str
    explanation: str
    score_impact: float
    fix: Fix

    @classmethod
    def blocking(cls, id: str, rule: str, location: Location, message: str, explanation: str,
                 score_impact: float, fix: Fix) -> Issue:
        return cls(id, rule, "error", "blocking", location, message, explanation, score_impact, fix)

    @classmethod
    def warning(cls, id: str, rule: str, location: Location, message: str, explanation: str,
                score_impact: float, fix: Fix) -> Issue:
        return cls(id, rule, "warning", "non-blocking", location, message, explanation, score_impact, fix)

    @property
    def is_blocking(self) -> bool:
        return self.type == "error" and self.severity == "blocking"

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "rule": self.rule,
            "type": self.type,
            "severity": self.severity,
            "location": self.location.to_payload(),
            "message": self.message,
            "explanation": self.explanation,
            "score_impact": self.score_impact,
            "fix": self.fix.to_payload(),
        }


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleScore:
    score: float
    max: int
    issues: int
    details: dict[str, object] = field(default_factory=dict)

    def to_payload(self) -> dict[str, object]:
        return {"score": self.score, "max": self.max, "issues": self.issues, **self.details}


@dataclass(frozen=True)
class TopFix:
    issue_id: str
    impact: float
    fix: str
    type: IssueType
    suggestion: str

    def to_payload(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class Score:
    total: int
    breakdown: dict[str, RuleScore]
    status: Status
    blocking_issues: int
    top_fixes: tuple[TopFix, ...]

    def to_payload(self) -> dict[str, object]:
        return {
            "total": self.total,
            "breakdown": {name: rs.to_payload() for name, rs in self.breakdown.items()},
            "status": self.status,
            "blocking_issues": self.blocking_issues,
            "top_fixes": [f.to_payload() for f in self.top_fixes],
        }


# ---------------------------------------------------------------------------
# Fact normalization
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ("" if value is None else str(value))


def parse_fact_line(line: str, index: int) -> Fact:
    """Parse one ``Subject | Predicate | Object`` line."""
    parts = [p.strip() for p in line.split("|")]
    parts += [""] * (3 - len(parts))
    return Fact(id=f"fact-{index}", subject=parts[0], predicate=parts[1], object=parts[2])


@singledispatch
def _coerce_fact(item: object, index: int) -> Fact | None:
    return None


@_coerce_fact.register
def _(item: Fact, index: int) -> Fact | None:
    return item


@_coerce_fact.register
def _(item: str, index: int) -> Fact | None:
    return parse_fact_line(item, index)


@_coerce_fact.register(Mapping)
def _(item: Mapping, index: int) -> Fact | None:
    grounded = item.get("grounded")
    return Fact(
        id=_text(item.get("id")) or f"fact-{index}",
        subject=_text(item.get("subject") or item.get("entity")),
        predicate=_text(item.get("predicate") or item.get("relation")),
        object=_text(item.get("object")),
        object_type=item.get("object_type"),
        evidence_text=item.get("evidence_text") or None,
        source_section_id=item.get("source_section_id") or None,
        grounded=grounded if isinstance(grounded, bool) else None,
    )


def normalize_facts(raw: object) -> tuple[Fact, ...]:
    """Turn any accepted fact shape into a tuple of :class:`Fact`.

    Accepts ``None``, a newline-delimited ``S | P | O`` string, or an iterable
    of ``Fact`` objects, mappings, or pipe-delimited strings. Items of any other
    type are dropped.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        lines = [line.strip() for line in raw.split("\n")]
        lines = [line for line in lines if line and "|" in line]
        return tuple(parse_fact_line(line, i) for i, line in enumerate(lines))
    if isinstance(raw, Mapping) or not isinstance(raw, Iterable):
        return ()
    facts = (_coerce_fact(item, i) for i, item in enumerate(raw))
    return tuple(f for f in facts if f is not None)
