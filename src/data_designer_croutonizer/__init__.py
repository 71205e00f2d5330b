# SPDX-License-Identifier: Apache-2.0
"""Croutonizer: editorial linter and scorer for machine-citable content.

Checks a title, answer box, headed sections and subject-predicate-object facts
against six deterministic rules and returns located issues plus a 0-100 score.
No LLM calls, no API dependencies.

Usage::

    from data_designer_croutonizer import analyze_content

    result = analyze_content({
        "title": "Sourdough Starter Hydration",
        "answerBox": "Crouton Summary: Sourdough starters ferment best at 100% hydration.",
        "sections": [{"heading": "...", "content": "..."}],
        "keyFacts": "Sourdough starter | ferments best at | 100% hydration",
    })
    result["score"]["total"]

As a NeMo Data Designer column (``column_type="croutonizer"``)::

    from data_designer_croutonizer import CroutonizerColumnConfig

    builder.add_column(CroutonizerColumnConfig(
        name="crouton_check",
        title_column="title",
        sections_column="sections",
        min_score=70,
    ))
"""

from data_designer_croutonizer.config import CroutonizerColumnConfig
from data_designer_croutonizer.core import CroutonizerError, analyze_content, build_content
from data_designer_croutonizer.hyperparameters import DEFAULT_HYPERPARAMETERS, Hyperparameters
from data_designer_croutonizer.lexicon import DEFAULT_LEXICON, Lexicon
from data_designer_croutonizer.linter import run_linter
from data_designer_croutonizer.models import Document, Fact, Issue, Score, normalize_facts
from data_designer_croutonizer.parser import parse_document
from data_designer_croutonizer.scorer import calculate_score

__all__ = [
    "analyze_content",
    "build_content",
    "calculate_score",
    "CroutonizerColumnConfig",
    "CroutonizerError",
    "DEFAULT_HYPERPARAMETERS",
    "DEFAULT_LEXICON",
    "Document",
    "Fact",
    "Hyperparameters",
    "Issue",
    "Lexicon",
    "normalize_facts",
    "parse_document",
    "run_linter",
    "Score",
]
