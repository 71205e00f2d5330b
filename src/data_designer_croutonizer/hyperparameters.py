from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Hyperparameters:
    """Tunable thresholds and penalties used by the parser and the six rules."""

    # Parser
    tokens_per_word: float = 1.3
    summary_marker: str = "Crouton Summary:"
    summary_min_words: int = 12
    summary_max_words: int = 35

    # Section anchoring
    anchor_token_threshold: int = 700
    anchor_word_threshold: int = 500
    anchor_missing_penalty: float = -5
    anchor_pronoun_penalty: float = -2
    anchor_vague_penalty: float = -1
    anchor_error_weight: float = 5
    anchor_warning_weight: float = 2

    # Entity persistence
    lookback_tokens: int = 150
    far_entity_tokens: int = 100
    pronoun_start_penalty: float = -4
    far_entity_penalty: float = -2
    pronoun_density_threshold: float = 0.10
    pronoun_density_min_entities: int = 2
    pronoun_density_penalty: float = -1
    persistence_error_weight: float = 4
    persistence_warning_weight: float = 2

    # Claim-evidence mapping
    no_key_facts_penalty: float = -20
    unmapped_fact_penalty: float = -5
    multi_hop_max_tokens: int = 900
    multi_hop_penalty: float = -2
    bridging_min_section_index: int = 2
    bridging_penalty: float = -1
    evidence_span_penalty: float = -1
    conclusion_min_ratio: float = 0.5
    conclusion_penalty: float = -2
    claim_error_weight: float = 5
    claim_warning_weight: float = 0.5
    fact_display_chars: int = 60

    # Header specificity
    header_topic_weight: float = 0.4
    header_qualifier_weight: float = 0.4
    header_entity_weight: float = 0.2
    header_length_penalty: float = 0.1
    header_min_words: int = 4
    header_max_words: int = 12
    header_low_score: float = 0.4
    header_generic_penalty: float = -2
    header_low_penalty: float = -2
    header_vague_penalty: float = -1
    header_consecutive_min: int = 2
    header_consecutive_penalty: float = -5
    header_error_weight: float = 5
    header_warning_weight: float = 2
    header_suggestion_min_chars: int = 10
    header_suggestion_max_chars: int = 80

    # Fact density
    density_words_basis: float = 100.0
    density_ideal_min: float = 0.8
    density_ideal_max: float = 2.0
    density_overage_span: float = 1.0
    density_high_factor: float = 1.5
    density_low_penalty: float = -3
    density_high_penalty: float = -1
    dead_zone_min_paragraphs: int = 2
    dead_zone_penalty: float = -2
    dead_zone_cap: int = 5
    density_warning_cap: int = 5
    hedge_ratio_threshold: float = 0.05
    hedge_min_count: int = 3
    hedge_penalty: float = -1
    vibe_min_matches: int = 2
    vibe_penalty: float = -1

    # Fact quality
    fact_min_field_chars: int = 2
    fact_structure_penalty: float = -2
    fact_pronoun_penalty: float = -2
    compound_predicate_penalty: float = -1
    vague_predicate_penalty: float = -1
    specific_object_min_chars: int = 30
    ungrounded_penalty: float = -2
    missing_evidence_penalty: float = -0.5

    # Scorer
    top_fixes_limit: int = 5


DEFAULT_HYPERPARAMETERS = Hyperparameters()
