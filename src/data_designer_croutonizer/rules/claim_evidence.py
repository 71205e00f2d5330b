"""Claim-evidence mapping.

Every key fact declared for a page must be substantiated by a content
section. Beyond the basic mapping this rule looks at retrieval distance
between where a claim is introduced (answer box or first section) and where
its support lives, at bridging phrases in distant sections, at evidence spans
on each fact, and at whether a closing section restates the facts.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon
from data_designer_croutonizer.models import (
    CLAIM_EVIDENCE,
    RULE_MAXIMA,
    Document,
    Fact,
    Fix,
    Issue,
    Location,
    RuleScore,
    Section,
)


@dataclass(frozen=True)
class FactMapping:
    section_id: str
    section_index: int
    section_title: str


def find_supporting_section(fact: Fact, document: Document) -> FactMapping | None:
    """First non-answer-box section containing the fact's subject and predicate (case-insensitive)."""
    subject = fact.subject.strip().lower()
    predicate = fact.predicate.strip().lower()
    if not subject:
        return None
    for index, section in enumerate(document.sections):
        if section.is_answer_box:
            continue
        text = section.text.lower()
        if subject in text and (not predicate or predicate in text):
            return FactMapping(section.id, index, section.title)
    return None


def describe_fact(fact: Fact, limit: int = 60) -> str:
    text = f"{fact.subject} {fact.predicate} {fact.object}"
    return text[:limit] + "..." if len(text) > limit else text


def check_claim_evidence(
    document: Document,
    key_facts: Sequence[Fact],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> tuple[Issue, ...]:
    if not key_facts:
        return (Issue.blocking(
            id="claim-evidence-no-facts",
            rule=CLAIM_EVIDENCE,
            location=Location(section_id="metadata"),
            message="No Key Facts defined",
            explanation="Every article needs at least 3 Key Facts for LLM citations",
            score_impact=hp.no_key_facts_penalty,
            fix=Fix(
                type="suggest",
                suggestion="Add Key Facts in Subject-Predicate-Object format",
                action="manual",
                instructions="Write one fact per line as: Subject | Predicate | Object",
            ),
        ),)

    issues: list[Issue] = []
    for idx, fact in enumerate(key_facts):
        mapping = find_supporting_section(fact, document)
        if mapping is None:
            issues.append(Issue.blocking(
                id=f"claim-evidence-unmapped-{idx}",
                rule=CLAIM_EVIDENCE,
                location=Location(fact_index=idx),
                message=f'Key Fact "{describe_fact(fact, hp.fact_display_chars)}" has no supporting section',
                explanation="Each Key Fact must be explained in detail in at least one section",
                score_impact=hp.unmapped_fact_penalty,
                fix=Fix(
                    type="map",
                    suggestion=f"Map this fact to a section that discusses {fact.subject or 'the fact subject'}",
                    action="selectSection",
                    fact_id=fact.id,
                ),
            ))
        else:
            support = document.sections[mapping.section_index]
            issue = _check_multi_hop_distance(idx, fact, mapping, support, document, hp)
            if issue:
                issues.append(issue)
            issue = _check_bridging_reference(idx, fact, mapping, support, hp, lexicon)
            if issue:
                issues.append(issue)

        issue = _check_evidence_span(idx, fact, hp)
        if issue:
            issues.append(issue)

    issue = _check_conclusion_restatement(key_facts, document, hp, lexicon)
    if issue:
        issues.append(issue)
    return tuple(issues)


def claim_distance(mapping: FactMapping, document: Document) -> int:
    """Token gap between the claim's introduction and the start of its supporting section."""
    intro = document.answer_box or next(iter(document.content_sections), None)
    claim_tokens = intro.token_count if intro else 0
    support_offset = sum(s.token_count for s in document.sections[:mapping.section_index])
    return support_offset - claim_tokens


def _check_multi_hop_distance(
    idx: int,
    fact: Fact,
    mapping: FactMapping,
    support: Section,
    document: Document,
    hp: Hyperparameters,
) -> Issue | None:
    distance = claim_distance(mapping, document)
    if distance <= hp.multi_hop_max_tokens:
        return None
    return Issue.warning(
        id=f"claim-evidence-distance-{idx}-{mapping.section_id}",
        rule=CLAIM_EVIDENCE,
        location=Location(section_id=mapping.section_id, fact=describe_fact(fact, hp.fact_display_chars)),
        message=f"Fact support is {distance} tokens away from claim",
        explanation="Large gaps between claim and evidence hurt multi-hop retrieval",
        score_impact=hp.multi_hop_penalty,
        fix=_bridging_fix(fact, support),
    )


def _check_bridging_reference(
    idx: int,
    fact: Fact,
    mapping: FactMapping,
    support: Section,
    hp: Hyperparameters,
    lexicon: Lexicon,
) -> Issue | None:
    if mapping.section_index <= hp.bridging_min_section_index:
        return None
    text = support.text.lower()
    if any(phrase in text for phrase in lexicon.bridging_phrases):
        return None
    return Issue.warning(
        id=f"claim-evidence-bridging-{idx}-{mapping.section_id}",
        rule=CLAIM_EVIDENCE,
        location=Location(section_id=mapping.section_id, paragraph_index=0),
        message=f'Section "{mapping.section_title}" discusses fact but lacks bridging reference',
        explanation="Add a sentence connecting this section back to the main claim",
        score_impact=hp.bridging_penalty,
        fix=_bridging_fix(fact, support),
    )


def _bridging_fix(fact: Fact, section: Section) -> Fix:
    subject = fact.subject
    alternatives = (
        f"This section applies the {subject} {fact.predicate or 'concept'} defined earlier.",
        f"Returning to {subject}: {section.title.lower()} demonstrates this principle.",
        f"Building on the {subject} claim, this section explains implementation.",
    )
    return Fix(
        type="insert",
        suggestion=alternatives[0],
        action="insertAtStart",
        instructions="Add a bridging sentence at the start of this section",
        alternatives=alternatives,
    )


def _check_evidence_span(idx: int, fact: Fact, hp: Hyperparameters) -> Issue | None:
    if fact.evidence_text or fact.source_section_id:
        return None
    return Issue.warning(
        id=f"claim-evidence-span-{fact.id}",
        rule=CLAIM_EVIDENCE,
        location=Location(fact_index=idx, fact_id=fact.id),
        message=f'Fact "{describe_fact(fact, hp.fact_display_chars)}" has no evidence span',
        explanation="Facts should point to exact text in narrative for grounding",
        score_impact=hp.evidence_span_penalty,
        fix=Fix(
            type="suggest",
            suggestion="Attach the sentence that states this fact as its evidence text",
            action="extract",
            fact_id=fact.id,
        ),
    )


def _check_conclusion_restatement(
    key_facts: Sequence[Fact],
    document: Document,
    hp: Hyperparameters,
    lexicon: Lexicon,
) -> Issue | None:
    regular = document.content_sections
    if not regular:
        return None
    conclusion = regular[-1]
    if not any(t in conclusion.title.lower() for t in lexicon.conclusion_titles):
        return None

    text = conclusion.text.lower()
    mentioned = sum(1 for f in key_facts if f.subject and f.subject.lower() in text)
    if mentioned / len(key_facts) >= hp.conclusion_min_ratio:
        return None
    subjects = [f.subject for f in key_facts if f.subject]
    return Issue.warning(
        id="claim-evidence-conclusion",
        rule=CLAIM_EVIDENCE,
        location=Location(section_id=conclusion.id),
        message=f"Conclusion only restates {mentioned}/{len(key_facts)} Key Facts",
        explanation="Good conclusions explicitly restate main claims for retrieval",
        score_impact=hp.conclusion_penalty,
        fix=Fix(
            type="suggest",
            suggestion="Add a sentence summarizing each Key Fact",
            action="manual",
            instructions=f"Mention: {', '.join(subjects[:3])}",
        ),
    )


def score_claim_evidence(
    document: Document,
    key_facts: Sequence[Fact],
    issues: Iterable[Issue],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
) -> RuleScore:
    max_points = RULE_MAXIMA[CLAIM_EVIDENCE]
    own = [i for i in issues if i.rule == CLAIM_EVIDENCE]
    if not key_facts:
        return RuleScore(score=0, max=max_points, issues=len(own), details={"message": "No facts defined"})

    mapped = sum(1 for f in key_facts if find_supporting_section(f, document) is not None)
    errors = sum(1 for i in own if i.type == "error")
    warnings = sum(1 for i in own if i.type == "warning")
    base = max_points * mapped / len(key_facts)
    score = base - hp.claim_error_weight * errors - hp.claim_warning_weight * warnings
    return RuleScore(
        score=max(0, score),
        max=max_points,
        issues=len(own),
        details={"mapped": mapped, "total": len(key_facts)},
    )
