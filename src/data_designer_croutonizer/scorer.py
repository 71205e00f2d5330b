from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon
from data_designer_croutonizer.linter import determine_status, get_blocking_issues
from data_designer_croutonizer.models import (
    CLAIM_EVIDENCE,
    ENTITY_PERSISTENCE,
    FACT_DENSITY,
    FACT_QUALITY,
    HEADER_SPECIFICITY,
    RULE_MAXIMA,
    SECTION_ANCHORING,
    Document,
    Issue,
    RuleScore,
    Score,
    TopFix,
    normalize_facts,
)
from data_designer_croutonizer.rules import (
    score_claim_evidence,
    score_entity_persistence,
    score_fact_density,
    score_fact_quality,
    score_header_specificity,
    score_section_anchoring,
)

logger = logging.getLogger(__name__)

SCORE_MAX = 100


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(rule: str, result: RuleScore) -> RuleScore:
    max_points = RULE_MAXIMA[rule]
    if 0 <= result.score <= max_points:
        return result
    return RuleScore(min(max_points, max(0, result.score)), result.max, result.issues, result.details)


def rank_fixes_by_impact(issues: Sequence[Issue], limit: int | None = None) -> list[TopFix]:
    """Issues ordered by absolute score impact, largest first; ties keep issue order."""
    ranked = sorted(
        (i for i in issues if i.fix and i.score_impact),
        key=lambda i: abs(i.score_impact),
        reverse=True,
    )
    fixes = [
        TopFix(
            issue_id=i.id,
            impact=abs(i.score_impact),
            fix=i.message,
            type=i.type,
            suggestion=i.fix.suggestion or i.fix.instructions or "",
        )
        for i in ranked
    ]
    return fixes[:limit] if limit is not None else fixes


def calculate_score(
    document: Document,
    issues: Sequence[Issue],
    key_facts: object = None,
    *,
    hyperparameters: Hyperparameters | None = None,
    lexicon: Lexicon | None = None,
) -> Score:
    """Turn the linter's issues into the 0-100 score.

    Each rule's points are re-derived from the document and the issue list,
    clamped to ``[0, max]`` without rounding. The total is rounded once,
    half-up, from the sum of the six rule scores.
    """
    hp = hyperparameters or DEFAULT_HYPERPARAMETERS
    lex = lexicon or DEFAULT_LEXICON
    facts = normalize_facts(key_facts)
    sections = document.sections

    breakdown = {
        SECTION_ANCHORING: score_section_anchoring(sections, issues, hp),
        ENTITY_PERSISTENCE: score_entity_persistence(sections, issues, hp, lex),
        CLAIM_EVIDENCE: score_claim_evidence(document, facts, issues, hp),
        HEADER_SPECIFICITY: score_header_specificity(sections, issues, hp, lex),
        FACT_DENSITY: score_fact_density(document, document.facts, issues, hp),
        FACT_QUALITY: score_fact_quality(document.facts, issues),
    }
    breakdown = {rule: _clamp(rule, result) for rule, result in breakdown.items()}

    raw_total = sum(r.score for r in breakdown.values())
    total = min(SCORE_MAX, max(0, round_half_up(raw_total)))
    for rule, result in breakdown.items():
        logger.debug(f"{rule}: {result.score:.2f}/{result.max}")

    return Score(
        total=total,
        breakdown=breakdown,
        status=determine_status(issues),
        blocking_issues=len(get_blocking_issues(issues)),
        top_fixes=tuple(rank_fixes_by_impact(issues, hp.top_fixes_limit)),
    )
