"""Entity persistence: pronoun-led paragraphs must resolve to a nearby named entity."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon, leading_word_regex, word_regex
from data_designer_croutonizer.models import (
    ENTITY_PERSISTENCE,
    RULE_MAXIMA,
    Fix,
    Issue,
    Location,
    Paragraph,
    RuleScore,
    Section,
)
from data_designer_croutonizer.parser import (
    count_entity_mentions,
    extract_entities,
    find_entity_mentions,
    get_previous_tokens,
    starts_with_pronoun,
)


def check_entity_persistence(
    sections: Iterable[Section],
    entities: Sequence[str],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> tuple[Issue, ...]:
    issues: list[Issue] = []
    for section in sections:
        for paragraph in section.paragraphs:
            if starts_with_pronoun(paragraph.text, lexicon):
                issue = _check_pronoun_start(paragraph, section, entities, hp, lexicon)
                if issue:
                    issues.append(issue)
            issue = _check_pronoun_density(paragraph, section, entities, hp, lexicon)
            if issue:
                issues.append(issue)
    return tuple(issues)


def tokens_since_last_mention(tokens: Sequence[str], entities: Iterable[str]) -> int | None:
    """Number of tokens following the latest entity mention in ``tokens``, or None if none is mentioned."""
    joined = " ".join(tokens).lower()
    last_end = -1
    for entity in entities:
        pos = joined.rfind(entity.lower())
        if pos >= 0:
            last_end = max(last_end, pos + len(entity))
    if last_end < 0:
        return None
    return len(joined[last_end:].split())


def _check_pronoun_start(
    paragraph: Paragraph,
    section: Section,
    entities: Sequence[str],
    hp: Hyperparameters,
    lexicon: Lexicon,
) -> Issue | None:
    previous = get_previous_tokens(section, paragraph.index, hp.lookback_tokens)
    window = " ".join(previous)
    mentions = find_entity_mentions(window, entities)
    location = Location(
        section_id=section.id,
        paragraph_index=paragraph.index,
        char_range=(paragraph.start_char, paragraph.start_char + 50),
    )

    if not mentions:
        return Issue.blocking(
            id=f"entity-persistence-start-{section.id}-{paragraph.index}",
            rule=ENTITY_PERSISTENCE,
            location=location,
            message=f"Paragraph starts with pronoun but no entity mentioned in last {hp.lookback_tokens} tokens",
            explanation="Chunks lose context. Start with explicit entity name.",
            score_impact=hp.pronoun_start_penalty,
            fix=suggest_entity_replacement(paragraph, section, entities, lexicon=lexicon),
        )

    distance = tokens_since_last_mention(previous, mentions)
    if distance is not None and distance > hp.far_entity_tokens:
        return Issue.warning(
            id=f"entity-persistence-far-{section.id}-{paragraph.index}",
            rule=ENTITY_PERSISTENCE,
            location=location,
            message=f"Paragraph starts with pronoun; entity last mentioned {distance} tokens ago",
            explanation="Consider repeating entity name for clarity",
            score_impact=hp.far_entity_penalty,
            fix=suggest_entity_replacement(paragraph, section, entities, mentions, lexicon),
        )
    return None


def _check_pronoun_density(
    paragraph: Paragraph,
    section: Section,
    entities: Sequence[str],
    hp: Hyperparameters,
    lexicon: Lexicon,
) -> Issue | None:
    if paragraph.word_count == 0:
        return None
    pronouns = [m.group(0) for m in word_regex(lexicon.density_pronouns).finditer(paragraph.text)]
    mentions = count_entity_mentions(paragraph.text, entities)
    density = len(pronouns) / paragraph.word_count
    if density <= hp.pronoun_density_threshold or mentions >= hp.pronoun_density_min_entities:
        return None
    return Issue.warning(
        id=f"entity-persistence-density-{section.id}-{paragraph.index}",
        rule=ENTITY_PERSISTENCE,
        location=Location(section_id=section.id, paragraph_index=paragraph.index),
        message=f"High pronoun density: {len(pronouns)} pronouns, only {mentions} entity mentions",
        explanation="Replace pronouns with explicit entity names for better chunk self-sufficiency",
        score_impact=hp.pronoun_density_penalty,
        fix=Fix(
            type="suggest",
            suggestion="Replace pronouns with specific entity names",
            action="manual",
            instructions=f"Found pronouns: {', '.join(pronouns[:5])}",
        ),
    )


def suggest_entity_replacement(
    paragraph: Paragraph,
    section: Section,
    entities: Sequence[str],
    recent: Sequence[str] | None = None,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> Fix:
    candidates = list(recent or entities)
    if not candidates:
        candidates = extract_entities(section.title, lexicon) + list(entities)
    top = candidates[0] if candidates else "the system"

    pattern = leading_word_regex(lexicon.paragraph_start_pronouns)
    text = paragraph.text.strip()
    match = pattern.match(text)
    first_pronoun = match.group(0) if match else ""
    replaced = pattern.sub(lambda _m: top, text, count=1)
    return Fix(
        type="replace",
        suggestion=replaced[:100] + "...",
        action="replaceText",
        instructions=f'Replace "{first_pronoun}" with "{top}" or choose from: {", ".join(candidates[:3])}',
        candidates=tuple(candidates[:3]),
    )


def score_entity_persistence(
    sections: Sequence[Section],
    issues: Iterable[Issue],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> RuleScore:
    max_points = RULE_MAXIMA[ENTITY_PERSISTENCE]
    own = [i for i in issues if i.rule == ENTITY_PERSISTENCE]
    pronoun_starts = sum(
        1 for s in sections for p in s.paragraphs if starts_with_pronoun(p.text, lexicon)
    )
    if pronoun_starts == 0:
        return RuleScore(score=max_points, max=max_points, issues=len(own))

    errors = sum(1 for i in own if i.type == "error")
    warnings = sum(1 for i in own if i.type == "warning")
    score = max_points - hp.persistence_error_weight * errors - hp.persistence_warning_weight * warnings
    return RuleScore(
        score=max(0, score),
        max=max_points,
        issues=len(own),
        details={"pronoun_starts": pronoun_starts, "unresolved": errors},
    )
