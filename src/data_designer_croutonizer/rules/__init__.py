"""The six rubric checkers. Each exposes a ``check_*`` function returning a tuple
of issues and a ``score_*`` function re-deriving its point allocation."""

from data_designer_croutonizer.rules.claim_evidence import check_claim_evidence, score_claim_evidence
from data_designer_croutonizer.rules.entity_persistence import check_entity_persistence, score_entity_persistence
from data_designer_croutonizer.rules.fact_density import check_fact_density, score_fact_density
from data_designer_croutonizer.rules.fact_quality import check_fact_quality, score_fact_quality
from data_designer_croutonizer.rules.header_specificity import check_header_specificity, score_header_specificity
from data_designer_croutonizer.rules.section_anchoring import check_section_anchoring, score_section_anchoring

__all__ = [
    "check_section_anchoring",
    "check_entity_persistence",
    "check_claim_evidence",
    "check_header_specificity",
    "check_fact_density",
    "check_fact_quality",
    "score_section_anchoring",
    "score_entity_persistence",
    "score_claim_evidence",
    "score_header_specificity",
    "score_fact_density",
    "score_fact_quality",
]
