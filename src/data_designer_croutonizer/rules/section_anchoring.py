"""Section anchoring: long sections must close with a self-contained summary."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon, word_regex
from data_designer_croutonizer.models import RULE_MAXIMA, SECTION_ANCHORING, Fix, Issue, Location, RuleScore, Section
from data_designer_croutonizer.parser import extract_action_words, extract_entities, strip_summary_marker


def requires_anchor(section: Section, hp: Hyperparameters = DEFAULT_HYPERPARAMETERS) -> bool:
    if section.is_answer_box:
        return False
    return section.token_count > hp.anchor_token_threshold or section.word_count > hp.anchor_word_threshold


def check_section_anchoring(
    sections: Iterable[Section],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> tuple[Issue, ...]:
    issues: list[Issue] = []
    for section in sections:
        if not requires_anchor(section, hp):
            continue
        if section.has_summary:
            issues.extend(_validate_anchor(section, hp, lexicon))
            continue
        issues.append(Issue.blocking(
            id=f"section-anchor-{section.id}",
            rule=SECTION_ANCHORING,
            location=_last_paragraph(section),
            message=f'Section "{section.title}" is {section.word_count} words but missing Crouton Summary',
            explanation="Long sections need a summary to maintain retrieval reliability",
            score_impact=hp.anchor_missing_penalty,
            fix=_summary_fix(section, hp, lexicon),
        ))
    return tuple(issues)


def _last_paragraph(section: Section) -> Location:
    return Location(section_id=section.id, paragraph_index=len(section.paragraphs) - 1)


def _validate_anchor(section: Section, hp: Hyperparameters, lexicon: Lexicon) -> list[Issue]:
    summary = strip_summary_marker(section.paragraphs[-1].text, hp)
    issues: list[Issue] = []

    pronouns = [m.group(0) for m in word_regex(lexicon.summary_pronouns).finditer(summary)]
    if pronouns:
        issues.append(Issue.warning(
            id=f"section-anchor-pronoun-{section.id}",
            rule=SECTION_ANCHORING,
            location=_last_paragraph(section),
            message=f"Crouton Summary contains pronouns: {', '.join(pronouns)}",
            explanation="Summaries should use explicit entity names for clarity",
            score_impact=hp.anchor_pronoun_penalty,
            fix=Fix(type="suggest", suggestion=_replace_pronouns(summary, section, lexicon), action="replaceText"),
        ))

    lowered = summary.lower()
    if any(word in lowered for word in lexicon.summary_vague_words):
        issues.append(Issue.warning(
            id=f"section-anchor-vague-{section.id}",
            rule=SECTION_ANCHORING,
            location=_last_paragraph(section),
            message="Crouton Summary contains vague predicates",
            explanation="Be specific: use concrete verbs and measurable outcomes",
            score_impact=hp.anchor_vague_penalty,
            fix=Fix(type="suggest", suggestion="Make the summary more specific with concrete details", action="manual"),
        ))
    return issues


def _summary_fix(section: Section, hp: Hyperparameters, lexicon: Lexicon) -> Fix:
    entities = extract_entities(section.text, lexicon)
    title_words = section.title.split()
    main_entity = entities[0] if entities else (title_words[0] if title_words else "the topic")
    actions = extract_action_words(section.text, lexicon)
    main_action = actions[0] if actions else "defines"
    return Fix(
        type="insert",
        suggestion=f"{hp.summary_marker} This section explains how {main_entity} {main_action} for improved implementation.",
        action="insertAtEnd",
        instructions=(
            "Add this summary at the end of the section, or write your own "
            f"({hp.summary_min_words}-{hp.summary_max_words} words, no pronouns)"
        ),
    )


def _replace_pronouns(summary: str, section: Section, lexicon: Lexicon) -> str:
    # body only; the marker itself reads as a capitalized phrase
    body = " ".join(p.text for p in section.paragraphs[:-1])
    entities = extract_entities(body, lexicon)
    main_entity = entities[0] if entities else section.title
    this_phrase = f"this {section.title.lower()}"
    improved = re.sub(r"\bit\b", lambda _m: main_entity, summary, flags=re.IGNORECASE)
    improved = re.sub(r"\bthis\b", lambda _m: this_phrase, improved, flags=re.IGNORECASE)
    return re.sub(r"\bthat\b", lambda _m: main_entity, improved, flags=re.IGNORECASE)


def score_section_anchoring(
    sections: Sequence[Section],
    issues: Iterable[Issue],
    hp: Hyperparameters = DEFAULT_HYPERPARAMETERS,
) -> RuleScore:
    max_points = RULE_MAXIMA[SECTION_ANCHORING]
    required = [s for s in sections if requires_anchor(s, hp)]
    if not required:
        return RuleScore(score=max_points, max=max_points, issues=0)

    own = [i for i in issues if i.rule == SECTION_ANCHORING]
    errors = sum(1 for i in own if i.type == "error")
    warnings = sum(1 for i in own if i.type == "warning")
    score = max_points - hp.anchor_error_weight * errors - hp.anchor_warning_weight * warnings
    return RuleScore(
        score=max(0, score),
        max=max_points,
        issues=len(own),
        details={"required": len(required), "missing": errors},
    )
