from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import reduce
from typing import Callable

from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon
from data_designer_croutonizer.models import (
    CLAIM_EVIDENCE,
    ENTITY_PERSISTENCE,
    FACT_DENSITY,
    FACT_QUALITY,
    HEADER_SPECIFICITY,
    RULE_ORDER,
    SECTION_ANCHORING,
    Document,
    Fact,
    Issue,
    Status,
    normalize_facts,
)
from data_designer_croutonizer.parser import extract_entities
from data_designer_croutonizer.rules import (
    check_claim_evidence,
    check_entity_persistence,
    check_fact_density,
    check_fact_quality,
    check_header_specificity,
    check_section_anchoring,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Rule context and pipeline
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _LintContext:
    document: Document
    key_facts: tuple[Fact, ...]
    entities: tuple[str, ...]
    hp: Hyperparameters
    lexicon: Lexicon


_RuleChecker = Callable[[_LintContext], tuple[Issue, ...]]

_PIPELINE: tuple[tuple[str, _RuleChecker], ...] = (
    (SECTION_ANCHORING, lambda c: check_section_anchoring(c.document.sections, c.hp, c.lexicon)),
    (ENTITY_PERSISTENCE, lambda c: check_entity_persistence(c.document.sections, c.entities, c.hp, c.lexicon)),
    (CLAIM_EVIDENCE, lambda c: check_claim_evidence(c.document, c.key_facts, c.hp, c.lexicon)),
    (HEADER_SPECIFICITY, lambda c: check_header_specificity(c.document.sections, c.hp, c.lexicon)),
    (FACT_DENSITY, lambda c: check_fact_density(c.document, c.document.facts, c.hp, c.lexicon)),
    (FACT_QUALITY, lambda c: check_fact_quality(c.document.facts, c.hp, c.lexicon)),
)


def _run_pipeline(context: _LintContext, max_workers: int | None) -> list[tuple[Issue, ...]]:
    checkers = [checker for _, checker in _PIPELINE]
    if max_workers and max_workers > 1:
        # map() yields in submission order, so the merge below stays in rule order
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda checker: checker(context), checkers))
    return [checker(context) for checker in checkers]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_document_entities(document: Document, lexicon: Lexicon = DEFAULT_LEXICON) -> tuple[str, ...]:
    """Entities named in the title, the answer box and the first regular section."""
    sources = [document.title]
    if document.answer_box:
        sources.append(document.answer_box.text)
    if document.content_sections:
        sources.append(document.content_sections[0].text)
    entities = (e for text in sources for e in extract_entities(text, lexicon))
    return tuple(dict.fromkeys(entities))


def run_linter(
    document: Document,
    key_facts: object = None,
    *,
    hyperparameters: Hyperparameters | None = None,
    lexicon: Lexicon | None = None,
    max_workers: int | None = None,
) -> list[Issue]:
    """Run all six rules over ``document``.

    Args:
        document: Parsed document; its ``facts`` are the extracted facts used by
            the density and quality rules.
        key_facts: Declared key facts in any shape accepted by
            :func:`~data_designer_croutonizer.models.normalize_facts`.
        hyperparameters: Optional threshold and penalty overrides.
        lexicon: Optional keyword table overrides.
        max_workers: Run the checkers on a thread pool of this size. The
            result is identical to the sequential run.

    Returns:
        Issues concatenated in fixed rule order, each rule's issues in
        section/paragraph order.
    """
    hp = hyperparameters or DEFAULT_HYPERPARAMETERS
    lex = lexicon or DEFAULT_LEXICON
    context = _LintContext(
        document=document,
        key_facts=normalize_facts(key_facts),
        entities=extract_document_entities(document, lex),
        hp=hp,
        lexicon=lex,
    )
    results = _run_pipeline(context, max_workers)
    for (rule, _), found in zip(_PIPELINE, results):
        logger.debug(f"{rule}: {len(found)} issue(s)")
    return list(reduce(lambda merged, found: merged + found, results, ()))


def group_issues_by_rule(issues: Iterable[Issue]) -> dict[str, list[Issue]]:
    grouped: dict[str, list[Issue]] = {rule: [] for rule in RULE_ORDER}
    for issue in issues:
        if issue.rule in grouped:
            grouped[issue.rule].append(issue)
    return grouped


def get_blocking_issues(issues: Iterable[Issue]) -> list[Issue]:
    return [i for i in issues if i.is_blocking]


def determine_status(issues: Sequence[Issue]) -> Status:
    if get_blocking_issues(issues):
        return "errors"
    if any(i.type == "warning" for i in issues):
        return "warnings"
    return "clean"
