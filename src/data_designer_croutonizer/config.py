from __future__ import annotations

from typing import Literal

from pydantic import Field

from data_designer.config.column_configs import SingleColumnConfig


class CroutonizerColumnConfig(SingleColumnConfig):
    """Lint structured article rows against the croutonizer citation rubric.

    Each row supplies a title, a list of ``{heading, content}`` sections (list
    or JSON string), and optionally an answer box and pipe-delimited key facts.
    The column receives a 0-100 score, a status, and the highest-impact fixes.

    Attributes:
        title_column: Column holding the article title.
        sections_column: Column holding the sections list.
        answer_box_column: Optional column holding the answer-box summary.
        key_facts_column: Optional column holding ``Subject | Predicate | Object`` lines.
        min_score: Minimum score (0-100) for ``is_valid=True``. Rows with blocking
            issues are never valid.
        include_issues: Include every issue payload in output.
        include_breakdown: Include the per-rule score breakdown in output.
    """

    title_column: str
    sections_column: str
    answer_box_column: str | None = Field(default=None, description="Column with the answer-box summary")
    key_facts_column: str | None = Field(default=None, description="Column with pipe-delimited key facts")
    min_score: int = Field(default=70, ge=0, le=100, description="Minimum croutonizer score for is_valid=True")
    include_issues: bool = Field(default=False, description="Include full issue payloads in output")
    include_breakdown: bool = Field(default=True, description="Include per-rule score breakdown in output")
    column_type: Literal["croutonizer"] = "croutonizer"

    @staticmethod
    def get_column_emoji() -> str:
        return "\U0001f35e"

    @property
    def required_columns(self) -> list[str]:
        columns = [self.title_column, self.sections_column, self.answer_box_column, self.key_facts_column]
        return [c for c in columns if c]

    @property
    def side_effect_columns(self) -> list[str]:
        return []
