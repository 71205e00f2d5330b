"""Fact density, dead zones, hedging and vibe claims."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon, compiled, word_regex
from data_designer_croutonizer.models import FACT_DENSITY, RULE_MAXIMA, Document, Fact, Fix, Issue, Location, RuleScore, Section

DEAD_ZONE_PREFIX = "fact-density-dead-zone-"


def fact_density(document: Document, facts: Sequence[Fact], hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> float:
    """Facts per ``density_words_basis`` words across the whole document."""
    words = document.metadata.total_words
    return (len(facts) / words) * hp.density_words_basis if words > 0 else 0.0


def density_band_score(density: float, hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> float:
    """1.0 inside the ideal band, linear ramps to 0 below it and above it."""
    if hp.density_ideal_min <= density <= hp.density_ideal_max:
        return 1.0
    if density < hp.density_ideal_min:
        return max(0.0, density / hp.density_ideal_min)
    overage = density - hp.density_ideal_max
    return max(0.0, 1.0 - overage / hp.density_overage_span)


def density_band(density: float, hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> str:
    if density < hp.density_ideal_min:
        return "low"
    if density > hp.density_ideal_max:
        return "high"
    return "ideal"


def facts_in_section(section: Section, facts: Iterable[Fact]) -> list[Fact]:
    lowered = section.text.lower()
    return [
        f for f in facts
        if f.source_section_id == section.id
        or (f.evidence_text and f.evidence_text.lower() in lowered)
    ]


def check_fact_density(
    document: Document,
    facts: Sequence[Fact],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> tuple[Issue, ...]:
    issues: list[Issue] = []
    density = fact_density(document, facts, hp)
    target = f"{hp.density_ideal_min}-{hp.density_ideal_max}"

    if document.metadata.total_words > 0 and density < hp.density_ideal_min:
        issues.append(Issue.warning(
            id="fact-density-low",
            rule=FACT_DENSITY,
            location=Location(section_id="document"),
            message=f"Low fact density: {density:.2f} facts per 100 words (target: {target})",
            explanation="Content needs more concrete, verifiable facts",
            score_impact=hp.density_low_penalty,
            fix=Fix(
                type="suggest",
                suggestion="Add specific facts: numbers, definitions, rules, comparisons",
                action="manual",
                instructions="Convert vague statements into concrete claims",
            ),
        ))
    if density > hp.density_ideal_max * hp.density_high_factor:
        issues.append(Issue.warning(
            id="fact-density-high",
            rule=FACT_DENSITY,
            location=Location(section_id="document"),
            message=f"Very high fact density: {density:.2f} per 100 words",
            explanation="Consider adding explanatory context between facts",
            score_impact=hp.density_high_penalty,
            fix=Fix(type="suggest", suggestion="Add context sentences to connect facts", action="manual"),
        ))

    for section in document.content_sections:
        if len(section.paragraphs) >= hp.dead_zone_min_paragraphs and not facts_in_section(section, facts):
            issues.append(Issue.warning(
                id=f"{DEAD_ZONE_PREFIX}{section.id}",
                rule=FACT_DENSITY,
                location=Location(section_id=section.id),
                message=f'Section "{section.title}" has no extractable facts (dead zone)',
                explanation="This section may be fluff or lack concrete information",
                score_impact=hp.dead_zone_penalty,
                fix=Fix(
                    type="suggest",
                    suggestion="Add specific facts, numbers, or definitions",
                    action="manual",
                    instructions="Convert general statements into verifiable claims",
                ),
            ))

    issues.extend(check_hedging(document, hp, lexicon))
    issues.extend(check_vibe_claims(document, hp, lexicon))
    return tuple(issues)


def check_hedging(
    document: Document,
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> list[Issue]:
    issues: list[Issue] = []
    pattern = word_regex(lexicon.hedge_words)
    for section in document.content_sections:
        if section.word_count == 0:
            continue
        found = [m.group(0).lower() for m in pattern.finditer(section.text)]
        if len(found) / section.word_count <= hp.hedge_ratio_threshold or len(found) < hp.hedge_min_count:
            continue
        distinct = list(dict.fromkeys(found))
        issues.append(Issue.warning(
            id=f"fact-density-hedge-{section.id}",
            rule=FACT_DENSITY,
            location=Location(section_id=section.id),
            message=f'Section "{section.title}" has excessive hedging ({len(found)} hedge words)',
            explanation="Too much uncertainty language weakens factual authority",
            score_impact=hp.hedge_penalty,
            fix=Fix(
                type="suggest",
                suggestion="Replace hedge words with definitive statements when possible",
                action="manual",
                instructions=f"Common hedges found: {', '.join(distinct[:5])}",
            ),
        ))
    return issues


def check_vibe_claims(
    document: Document,
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> list[Issue]:
    issues: list[Issue] = []
    for section in document.content_sections:
        matches = []
        for pattern in lexicon.vibe_claim_patterns:
            m = compiled(pattern).search(section.text)
            if m:
                matches.append(m.group(0))
        if len(matches) < hp.vibe_min_matches:
            continue
        issues.append(Issue.warning(
            id=f"fact-density-vibe-{section.id}",
            rule=FACT_DENSITY,
            location=Location(section_id=section.id),
            message=f'Section "{section.title}" contains vague claims without specifics',
            explanation="Vague positive statements need concrete objects/metrics",
            score_impact=hp.vibe_penalty,
            fix=Fix(
                type="suggest",
                suggestion='Add specific objects: "improves rankings by 15%" not just "improves"',
                action="manual",
                instructions=f"Found vague claims: {', '.join(matches[:3])}",
            ),
        ))
    return issues


def score_fact_density(
    document: Document,
    facts: Sequence[Fact],
    issues: Iterable[Issue],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
) -> RuleScore:
    max_points = RULE_MAXIMA[FACT_DENSITY]
    own = [i for i in issues if i.rule == FACT_DENSITY]
    density = fact_density(document, facts, hp)

    dead_zones = sum(1 for i in own if i.id.startswith(DEAD_ZONE_PREFIX))
    warnings = sum(1 for i in own if i.type == "warning") - dead_zones
    score = (
        max_points * density_band_score(density, hp)
        - min(hp.dead_zone_cap, dead_zones)
        - min(hp.density_warning_cap, warnings)
    )
    return RuleScore(
        score=max(0, score),
        max=max_points,
        issues=len(own),
        details={
            "density": f"{density:.2f}",
            "facts": len(facts),
            "words": document.metadata.total_words,
            "dead_zones": dead_zones,
            "band": density_band(density, hp),
        },
    )
