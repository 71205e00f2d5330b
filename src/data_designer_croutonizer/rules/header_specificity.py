"""Header specificity: section titles should read like the query they answer."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon, word_regex
from data_designer_croutonizer.models import HEADER_SPECIFICITY, RULE_MAXIMA, Fix, Issue, Location, RuleScore, Section
from data_designer_croutonizer.parser import extract_entities


@dataclass(frozen=True)
class HeaderScore:
    total: float
    topic: float
    qualifier: float
    entity: float
    length_penalty: float
    missing: tuple[str, ...]


def is_generic_header(title: str, lexicon: Lexicon = DEFAULT_LEXICON) -> bool:
    return title.strip().lower() in lexicon.generic_headers


def score_header(
    title: str,
    section: Section,
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> HeaderScore:
    """Specificity of ``title`` in [0, 1] from topic, qualifier and entity components."""
    lowered = title.lower()
    missing: list[str] = []

    has_topic = any(k.lower() in lowered for k in lexicon.topic_keywords)
    if not has_topic:
        missing.append("topic keyword")
    has_qualifier = word_regex(lexicon.qualifiers).search(title) is not None
    if not has_qualifier:
        missing.append("qualifier word")
    has_entity = any(e.lower() in lowered for e in extract_entities(section.text, lexicon))
    if not has_entity:
        missing.append("entity from content")

    word_count = len(title.split())
    length_penalty = (
        hp.header_length_penalty
        if word_count < hp.header_min_words or word_count > hp.header_max_words
        else 0.0
    )
    topic = hp.header_topic_weight if has_topic else 0.0
    qualifier = hp.header_qualifier_weight if has_qualifier else 0.0
    entity = hp.header_entity_weight if has_entity else 0.0
    return HeaderScore(
        total=max(0.0, topic + qualifier + entity - length_penalty),
        topic=topic,
        qualifier=qualifier,
        entity=entity,
        length_penalty=length_penalty,
        missing=tuple(missing),
    )


def check_header_specificity(
    sections: Sequence[Section],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> tuple[Issue, ...]:
    issues: list[Issue] = []
    for section in sections:
        if section.is_answer_box:
            continue
        issues.extend(_check_header(section, hp, lexicon))
    consecutive = _check_consecutive_generic(sections, hp, lexicon)
    if consecutive:
        issues.append(consecutive)
    return tuple(issues)


def _check_header(section: Section, hp: Hyperparameters, lexicon: Lexicon) -> list[Issue]:
    title = section.title
    location = Location(section_id=section.id, header=title)
    issues: list[Issue] = []

    if is_generic_header(title, lexicon):
        issues.append(Issue.warning(
            id=f"header-specificity-generic-{section.id}",
            rule=HEADER_SPECIFICITY,
            location=location,
            message=f'Header "{title}" is too generic',
            explanation="Generic headers don't help retrieval. Be specific about what this section covers.",
            score_impact=hp.header_generic_penalty,
            fix=suggest_header(title, section, hp, lexicon),
        ))
    else:
        score = score_header(title, section, hp, lexicon)
        if score.total < hp.header_low_score:
            issues.append(Issue.warning(
                id=f"header-specificity-low-{section.id}",
                rule=HEADER_SPECIFICITY,
                location=location,
                message=f'Header "{title}" lacks specificity (score: {round(score.total * 100)}%)',
                explanation=f"Add: {', '.join(score.missing)}",
                score_impact=hp.header_low_penalty,
                fix=suggest_header(title, section, hp, lexicon),
            ))

    if word_regex(lexicon.vague_nouns).search(title):
        issues.append(Issue.warning(
            id=f"header-specificity-vague-{section.id}",
            rule=HEADER_SPECIFICITY,
            location=location,
            message=f'Header "{title}" contains vague noun',
            explanation="Replace vague nouns with specific concepts",
            score_impact=hp.header_vague_penalty,
            fix=suggest_header(title, section, hp, lexicon),
        ))
    return issues


def _first_word_match(text: str, words: Sequence[str]) -> str | None:
    for word in words:
        if word_regex((word,)).search(text):
            return word
    return None


def suggest_header(
    title: str,
    section: Section,
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> Fix:
    """Query-ready alternative titles built from keywords found in the section body."""
    text = section.text
    lowered = text.lower()
    entities = extract_entities(text, lexicon)
    topics = [k for k in lexicon.topic_keywords if k.lower() in lowered]

    main_topic = topics[0] if topics else (entities[0] if entities else title)
    qualifier = _first_word_match(text, lexicon.qualifiers) or "key"
    action = _first_word_match(text, lexicon.header_actions) or "guide"
    context = _first_word_match(text, lexicon.header_contexts) or "implementation"

    templates = (
        f"{qualifier} {main_topic} {action}",
        f"How {main_topic} {action}",
        f"{main_topic} {action} for {context}",
        f"Understanding {main_topic} {qualifier} {action}",
    )
    suggestions = []
    for template in templates:
        candidate = " ".join(template.split())
        candidate = candidate[:1].upper() + candidate[1:]
        if hp.header_suggestion_min_chars <= len(candidate) <= hp.header_suggestion_max_chars:
            suggestions.append(candidate)

    return Fix(
        type="replace",
        suggestion=suggestions[0] if suggestions else f"{main_topic} Implementation Guide",
        action="renameHeader",
        instructions="Use a query-ready header that includes topic + qualifier",
        alternatives=tuple(suggestions[1:3]),
    )


def _check_consecutive_generic(
    sections: Sequence[Section],
    hp: Hyperparameters,
    lexicon: Lexicon,
) -> Issue | None:
    longest: list[str] = []
    run: list[str] = []
    for section in sections:
        if section.is_answer_box:
            continue
        if is_generic_header(section.title, lexicon):
            run.append(section.title)
            if len(run) > len(longest):
                longest = list(run)
        else:
            run = []

    if len(longest) < hp.header_consecutive_min:
        return None
    return Issue.blocking(
        id="header-specificity-consecutive",
        rule=HEADER_SPECIFICITY,
        location=Location(section_id="document"),
        message=f"{len(longest)} consecutive generic headers detected",
        explanation="Multiple generic headers in a row hurt content structure",
        score_impact=hp.header_consecutive_penalty,
        fix=Fix(
            type="suggest",
            suggestion=f"Rename: {', '.join(longest)}",
            action="manual",
            instructions="Make headers specific to section content",
        ),
    )


def score_header_specificity(
    sections: Sequence[Section],
    issues: Iterable[Issue],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> RuleScore:
    max_points = RULE_MAXIMA[HEADER_SPECIFICITY]
    regular = [s for s in sections if not s.is_answer_box]
    own = [i for i in issues if i.rule == HEADER_SPECIFICITY]
    if not regular:
        return RuleScore(score=max_points, max=max_points, issues=len(own))

    mean = sum(score_header(s.title, s, hp, lexicon).total for s in regular) / len(regular)
    errors = sum(1 for i in own if i.type == "error")
    warnings = sum(1 for i in own if i.type == "warning")
    score = max_points * mean - hp.header_error_weight * errors - hp.header_warning_weight * warnings
    return RuleScore(
        score=max(0, score),
        max=max_points,
        issues=len(own),
        details={"avg_specificity": f"{round(mean * 100)}%", "sections_analyzed": len(regular)},
    )
