from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from data_designer.engine.column_generators.generators.base import ColumnGeneratorFullColumn

from data_designer_croutonizer.config import CroutonizerColumnConfig
from data_designer_croutonizer.core import CroutonizerError, analyze_content, build_content

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)


def score_row(
    config: CroutonizerColumnConfig,
    title: object,
    sections: object,
    answer_box: object = None,
    key_facts: object = None,
) -> dict:
    """Score one article row into the column's output dict.

    A row that cannot be analyzed (for example truncated sections JSON) is
    reported as invalid with a ``crouton_error`` message instead of raising.
    """
    try:
        content = build_content(title=title, sections=sections, answer_box=answer_box, key_facts=key_facts)
        analysis = analyze_content(content)
    except CroutonizerError as exc:
        logger.warning(f"Skipping row in {config.name!r}: {exc}")
        return {
            "is_valid": False,
            "crouton_score": 0,
            "crouton_status": "errors",
            "blocking_issues": 0,
            "top_fixes": [],
            "crouton_error": str(exc),
        }

    score = analysis["score"]
    output: dict = {
        "is_valid": score["total"] >= config.min_score and score["blocking_issues"] == 0,
        "crouton_score": score["total"],
        "crouton_status": score["status"],
        "blocking_issues": score["blocking_issues"],
        "top_fixes": score["top_fixes"],
    }
    if config.include_breakdown:
        output["crouton_breakdown"] = score["breakdown"]
    if config.include_issues:
        output["crouton_issues"] = analysis["issues"]
    return output


class CroutonizerColumnGenerator(ColumnGeneratorFullColumn[CroutonizerColumnConfig]):
    """Column generator that lints and scores article rows for citation readiness."""

    def _value(self, row: pd.Series, column: str | None) -> object:
        if not column:
            return None
        value = row.get(column)
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    def generate(self, data: pd.DataFrame) -> pd.DataFrame:
        logger.info(f"\U0001f35e Croutonizing column {self.config.name!r}")
        logger.info(f"   title/sections: {self.config.title_column!r}/{self.config.sections_column!r}")
        logger.info(f"   min_score: {self.config.min_score}")

        results = [
            score_row(
                self.config,
                title=self._value(row, self.config.title_column),
                sections=self._value(row, self.config.sections_column),
                answer_box=self._value(row, self.config.answer_box_column),
                key_facts=self._value(row, self.config.key_facts_column),
            )
            for _, row in data[self.config.required_columns].iterrows()
        ]
        failed = sum(1 for r in results if "crouton_error" in r)
        if failed:
            logger.warning(f"   {failed}/{len(results)} row(s) could not be analyzed")

        data = data.copy()
        data[self.config.name] = results
        return data
