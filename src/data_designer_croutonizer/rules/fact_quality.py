"""Fact quality: structure, pronouns, predicate shape and grounding of extracted facts."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon, word_regex
from data_designer_croutonizer.models import FACT_QUALITY, RULE_MAXIMA, Fact, Fix, Issue, Location, RuleScore

_COMPOUND_SPLIT_RE = re.compile(r"\s+and\s+|\s+or\s+|,")
_DIGIT_RE = re.compile(r"\d")

_FIELD_HINTS = {
    "subject": ("Every fact needs a clear subject (entity or concept)", "Add explicit entity name (2+ characters)"),
    "predicate": ("Every fact needs a clear predicate (action or relationship)", "Add concrete verb or relationship"),
    "object": ("Every fact needs a clear object (what the subject does/is/has)", "Add specific outcome or value"),
}


def check_fact_quality(
    facts: Sequence[Fact],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> tuple[Issue, ...]:
    issues: list[Issue] = []
    for index, fact in enumerate(facts):
        issues.extend(_check_structure(fact, index, hp))
        for check in (_check_pronouns, _check_predicate, _check_grounding):
            issue = check(fact, index, hp, lexicon)
            if issue:
                issues.append(issue)
    return tuple(issues)


def _check_structure(fact: Fact, index: int, hp: Hyperparameters) -> list[Issue]:
    issues: list[Issue] = []
    for field_name, (explanation, suggestion) in _FIELD_HINTS.items():
        value = getattr(fact, field_name) or ""
        if len(value.strip()) >= hp.fact_min_field_chars:
            continue
        issues.append(Issue.blocking(
            id=f"fact-quality-structure-{field_name}-{index}",
            rule=FACT_QUALITY,
            location=Location(fact_index=index, field=field_name),
            message=f"Fact {index + 1}: {field_name.capitalize()} is missing or too short",
            explanation=explanation,
            score_impact=hp.fact_structure_penalty,
            fix=Fix(type="suggest", suggestion=suggestion, action="manual"),
        ))
    return issues


def _check_pronouns(fact: Fact, index: int, hp: Hyperparameters, lexicon: Lexicon) -> Issue | None:
    pattern = word_regex(lexicon.fact_pronouns)
    if pattern.search(fact.subject or ""):
        field_name, value = "subject", fact.subject
    elif pattern.search(fact.object or ""):
        field_name, value = "object", fact.object
    else:
        return None
    return Issue.blocking(
        id=f"fact-quality-pronoun-{index}",
        rule=FACT_QUALITY,
        location=Location(fact_index=index, field=field_name),
        message=f'Fact {index + 1}: Contains pronoun in {field_name}: "{value}"',
        explanation="Facts must use explicit entity names, not pronouns",
        score_impact=hp.fact_pronoun_penalty,
        fix=Fix(
            type="replace",
            suggestion="Replace pronoun with explicit entity name",
            action="manual",
            instructions=f'Change "{value}" to a specific entity (e.g., "301 redirect", "Google Search Console")',
        ),
    )


def is_specific_object(text: str, hp: Hyperparameters = DEFAULT_HYPERPARAMETERS, lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    """Objects with a number, a measure word, or enough length count as specific."""
    return (
        _DIGIT_RE.search(text) is not None
        or word_regex(lexicon.measure_words).search(text) is not None
        or len(text) > hp.specific_object_min_chars
    )


def _check_predicate(fact: Fact, index: int, hp: Hyperparameters, lexicon: Lexicon) -> Issue | None:
    predicate = (fact.predicate or "").strip().lower()
    location = Location(fact_index=index, field="predicate")

    if len(_COMPOUND_SPLIT_RE.split(predicate)) > 1:
        return Issue.warning(
            id=f"fact-quality-compound-{index}",
            rule=FACT_QUALITY,
            location=location,
            message=f"Fact {index + 1}: Compound predicate detected",
            explanation="Split compound facts into separate facts (one claim per fact)",
            score_impact=hp.compound_predicate_penalty,
            fix=Fix(
                type="suggest",
                suggestion="Split into multiple facts, one predicate each",
                action="manual",
                instructions=f'"{fact.subject} | {predicate} | {fact.object}" -> split at "and/or"',
            ),
        )

    if not any(vague in predicate for vague in lexicon.vague_predicates):
        return None
    if is_specific_object((fact.object or "").lower(), hp, lexicon):
        return None
    return Issue.warning(
        id=f"fact-quality-vague-{index}",
        rule=FACT_QUALITY,
        location=location,
        message=f'Fact {index + 1}: Vague predicate "{predicate}" needs specific object',
        explanation="Vague predicates need measurable outcomes",
        score_impact=hp.vague_predicate_penalty,
        fix=Fix(
            type="suggest",
            suggestion="Add specific measurement or comparison to object",
            action="manual",
            instructions=f'"{fact.subject} improves X" -> "{fact.subject} improves X by 15-20%"',
        ),
    )


def _check_grounding(fact: Fact, index: int, hp: Hyperparameters, lexicon: Lexicon) -> Issue | None:
    if fact.grounded is True or fact.evidence_text:
        return None
    if fact.grounded is False:
        return Issue.blocking(
            id=f"fact-quality-ungrounded-{index}",
            rule=FACT_QUALITY,
            location=Location(fact_index=index),
            message=f"Fact {index + 1}: Not grounded in source text",
            explanation="This fact cannot be verified from the narrative content",
            score_impact=hp.ungrounded_penalty,
            fix=Fix(
                type="suggest",
                suggestion="Remove fact or add supporting text to narrative",
                action="manual",
                instructions="Facts must be explicitly stated in the content",
            ),
        )
    return Issue.warning(
        id=f"fact-quality-no-evidence-{index}",
        rule=FACT_QUALITY,
        location=Location(fact_index=index),
        message=f"Fact {index + 1}: No evidence span provided",
        explanation="Facts should reference exact text for grounding",
        score_impact=hp.missing_evidence_penalty,
        fix=Fix(type="suggest", suggestion="Attach the supporting sentence as evidence text", action="extract"),
    )


def score_fact_quality(facts: Sequence[Fact], issues: Iterable[Issue]) -> RuleScore:
    max_points = RULE_MAXIMA[FACT_QUALITY]
    own = [i for i in issues if i.rule == FACT_QUALITY]
    if not facts:
        return RuleScore(score=0, max=max_points, issues=0, details={"message": "No facts to validate"})

    flagged = {i.location.fact_index for i in own if i.location.fact_index is not None}
    valid = len(facts) - len(flagged)
    ratio = valid / len(facts)
    return RuleScore(
        score=max_points * ratio,
        max=max_points,
        issues=len(own),
        details={
            "valid_facts": valid,
            "total_facts": len(facts),
            "quality_rate": f"{round(ratio * 100)}%",
        },
    )
