# Editorial linter for machine-citable content ("croutonizing").
#
# Parses a title / answer box / sections / facts payload into a document model,
# runs six deterministic rules against it, and returns located issues plus a
# 0-100 score with a per-rule breakdown and the highest-impact fixes.

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping

from data_designer_croutonizer.hyperparameters import Hyperparameters
from data_designer_croutonizer.lexicon import Lexicon
from data_designer_croutonizer.linter import run_linter
from data_designer_croutonizer.models import normalize_facts
from data_designer_croutonizer.parser import parse_document
from data_designer_croutonizer.scorer import calculate_score

logger = logging.getLogger(__name__)


class CroutonizerError(RuntimeError):
    """Raised when an analysis cannot be completed; carries the failing operation."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"[{operation}] {message}")
        self.operation = operation
        self.message = message


def build_content(
    title: object,
    sections: object,
    answer_box: object = None,
    key_facts: object = None,
) -> dict:
    """Assemble a content mapping from loosely typed values.

    ``sections`` may be any non-string iterable of ``{heading, content}``
    mappings (list, tuple, array cell) or a JSON string encoding one. Blank or
    missing values become empty fields.

    Raises:
        CroutonizerError: if ``sections`` is a string that is not valid JSON.
    """
    if isinstance(sections, str):
        try:
            sections = json.loads(sections) if sections.strip() else []
        except json.JSONDecodeError as exc:
            raise CroutonizerError("build_content", f"sections is not valid JSON: {exc}") from exc
    if isinstance(sections, Iterable) and not isinstance(sections, (str, bytes, Mapping)):
        sections = list(sections)
    else:
        if sections is not None:
            logger.warning(f"build_content: dropping sections of type {type(sections).__name__}")
        sections = []
    content: dict = {
        "title": "" if title is None else str(title),
        "sections": sections,
    }
    if isinstance(answer_box, str) and answer_box.strip():
        content["answerBox"] = answer_box
    if key_facts is not None:
        content["keyFacts"] = key_facts
    return content


def analyze_content(
    content: Mapping,
    key_facts: object = None,
    facts: object = None,
    *,
    hyperparameters: Hyperparameters | None = None,
    lexicon: Lexicon | None = None,
    include_document: bool = False,
) -> dict:
    """Lint and score a content payload.

    Args:
        content: Mapping with ``title``, optional ``answerBox``, ``sections``
            (list of ``{heading, content}``) and optional ``keyFacts``.
        key_facts: Declared key facts; defaults to ``content["keyFacts"]``.
            Either a newline-delimited ``Subject | Predicate | Object`` string
            or a list of fact mappings.
        facts: Extracted facts for the density and quality rules. Defaults to
            the key facts.
        hyperparameters: Optional threshold and penalty overrides.
        lexicon: Optional keyword table overrides.
        include_document: Also return the parsed document (sections,
            paragraphs and attached facts) under ``parsed``.

    Returns:
        Dict with keys: score (score payload), issues (list of issue
        payloads), document (word, token and section totals), and parsed
        when requested.

    Raises:
        CroutonizerError: if anything in the pipeline fails.
    """
    try:
        if key_facts is None and isinstance(content, Mapping):
            key_facts = content.get("keyFacts")
        declared = normalize_facts(key_facts)
        extracted = declared if facts is None else normalize_facts(facts)

        document = parse_document(content, hyperparameters).with_facts(extracted)
        issues = run_linter(document, declared, hyperparameters=hyperparameters, lexicon=lexicon)
        score = calculate_score(document, issues, declared, hyperparameters=hyperparameters, lexicon=lexicon)
    except Exception as exc:
        logger.error(f"croutonize failed: {exc}")
        raise CroutonizerError("croutonize", str(exc)) from exc

    logger.debug(f"croutonize: score={score.total} status={score.status} issues={len(issues)}")
    result = {
        "score": score.to_payload(),
        "issues": [i.to_payload() for i in issues],
        "document": document.metadata.to_payload(),
    }
    if include_document:
        result["parsed"] = document.to_payload()
    return result
