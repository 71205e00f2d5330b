import pytest

from data_designer_croutonizer.models import Fact
from data_designer_croutonizer.parser import parse_document
from data_designer_croutonizer.rules import (
    check_claim_evidence,
    check_entity_persistence,
    check_fact_density,
    check_fact_quality,
    check_header_specificity,
    check_section_anchoring,
    score_claim_evidence,
    score_entity_persistence,
    score_fact_density,
    score_fact_quality,
    score_section_anchoring,
)
from data_designer_croutonizer.rules.fact_density import density_band, density_band_score
from data_designer_croutonizer.rules.fact_quality import is_specific_object
from data_designer_croutonizer.rules.header_specificity import is_generic_header, score_header

LONG_BODY = " ".join(["word"] * 510)


def make_document(*sections, answer_box=None, title="Redirect Guide", facts=()):
    content = {
        "title": title,
        "sections": [{"heading": heading, "content": body} for heading, body in sections],
    }
    if answer_box:
        content["answerBox"] = answer_box
    return parse_document(content).with_facts(list(facts))


def ids(issues):
    return [i.id for i in issues]


class TestSectionAnchoring:
    def test_long_section_without_summary_is_blocking(self):
        document = make_document(("Long Section", LONG_BODY))
        issues = check_section_anchoring(document.sections)
        assert ids(issues) == ["section-anchor-section-0"]
        issue = issues[0]
        assert issue.is_blocking
        assert issue.score_impact == -5
        assert issue.location.paragraph_index == 0
        assert issue.fix.type == "insert"
        assert issue.fix.suggestion.startswith("Crouton Summary:")

        score = score_section_anchoring(document.sections, issues)
        assert score.score == 15
        assert score.details == {"required": 1, "missing": 1}

    def test_short_sections_need_no_anchor(self):
        document = make_document(("Short", "Only a few words."), answer_box=LONG_BODY)
        assert check_section_anchoring(document.sections) == ()
        assert score_section_anchoring(document.sections, ()).score == 20

    def test_summary_with_pronoun_and_vague_word(self):
        body = f"{LONG_BODY}\n\nCrouton Summary: It helps Google rank pages."
        document = make_document(("Long Section", body))
        issues = check_section_anchoring(document.sections)
        assert ids(issues) == ["section-anchor-pronoun-section-0", "section-anchor-vague-section-0"]
        assert all(not i.is_blocking for i in issues)
        assert "It" in issues[0].message
        assert [i.score_impact for i in issues] == [-2, -1]

    def test_clean_summary(self):
        body = f"{LONG_BODY}\n\nCrouton Summary: Google ranks the destination page after a permanent redirect."
        document = make_document(("Long Section", body))
        assert check_section_anchoring(document.sections) == ()


class TestEntityPersistence:
    def test_pronoun_start_without_entity_is_blocking(self):
        document = make_document(("Crawling", "It ranks pages."))
        issues = check_entity_persistence(document.sections, ["Google"])
        starts = [i for i in issues if "-start-" in i.id]
        assert ids(starts) == ["entity-persistence-start-section-0-0"]
        assert starts[0].is_blocking
        assert starts[0].fix.candidates == ("Google",)
        assert starts[0].fix.suggestion.startswith("Google ranks pages.")

    def test_recent_entity_resolves_pronoun(self):
        document = make_document(("Crawling", "Google ranks pages.\n\nIt ranks them."))
        issues = check_entity_persistence(document.sections, ["Google"])
        assert not [i for i in issues if "-start-" in i.id or "-far-" in i.id]

    def test_distant_entity_is_warning(self):
        filler = " ".join(["word"] * 120)
        document = make_document(("Crawling", f"Google ranks pages. {filler}\n\nIt ranks them."))
        issues = check_entity_persistence(document.sections, ["Google"])
        far = [i for i in issues if "-far-" in i.id]
        assert ids(far) == ["entity-persistence-far-section-0-1"]
        assert far[0].type == "warning"
        assert "122 tokens" in far[0].message

    def test_pronoun_density(self):
        document = make_document(("Crawling", "Google ranks pages.\n\nIt ranks them."))
        issues = check_entity_persistence(document.sections, ["Google"])
        assert ids(issues) == ["entity-persistence-density-section-0-1"]

    def test_score(self):
        document = make_document(("Crawling", "It ranks pages."))
        issues = check_entity_persistence(document.sections, [])
        score = score_entity_persistence(document.sections, issues)
        assert score.details["pronoun_starts"] == 1
        assert score.details["unresolved"] == 1
        assert score.score == 20 - 4 * 1 - 2 * (len(issues) - 1)

    def test_no_pronoun_starts_scores_full(self):
        document = make_document(("Crawling", "Google ranks pages."))
        assert score_entity_persistence(document.sections, ()).score == 20

    def test_density_warnings_counted_without_pronoun_starts(self):
        document = make_document(("Crawling", "Google ranks them and it and this."))
        issues = check_entity_persistence(document.sections, ["Google"])
        assert ids(issues) == ["entity-persistence-density-section-0-0"]
        score = score_entity_persistence(document.sections, issues)
        assert score.score == 20
        assert score.issues == 1


class TestClaimEvidence:
    def test_no_key_facts(self):
        document = make_document(("Redirects", "A 301 redirect passes link equity."))
        issues = check_claim_evidence(document, ())
        assert ids(issues) == ["claim-evidence-no-facts"]
        assert issues[0].is_blocking
        assert issues[0].score_impact == -20
        score = score_claim_evidence(document, (), issues)
        assert score.score == 0
        assert score.details == {"message": "No facts defined"}

    def test_unmapped_fact(self):
        document = make_document(("Redirects", "A 301 redirect passes link equity."))
        facts = (Fact(id="fact-0", subject="Bing", predicate="crawls", object="sitemaps"),)
        issues = check_claim_evidence(document, facts)
        assert ids(issues) == ["claim-evidence-unmapped-0", "claim-evidence-span-fact-0"]
        assert issues[0].fix.type == "map"
        assert score_claim_evidence(document, facts, issues).score == 0

    def test_mapped_fact_with_evidence(self):
        document = make_document(("Redirects", "A 301 redirect passes link equity."))
        facts = (Fact(id="fact-0", subject="301 redirect", predicate="passes", object="link equity",
                      evidence_text="passes link equity"),)
        issues = check_claim_evidence(document, facts)
        assert issues == ()
        score = score_claim_evidence(document, facts, issues)
        assert score.score == 20
        assert score.details == {"mapped": 1, "total": 1}

    def test_bridging_reference(self):
        sections = [
            ("Alpha", "Alpha text here."),
            ("Beta", "Beta text here."),
            ("Sitemaps", "Sitemap files list every canonical URL."),
        ]
        fact = Fact(id="fact-0", subject="Sitemap files", predicate="list", object="every canonical URL",
                    source_section_id="section-2")
        document = make_document(*sections, answer_box="Sitemaps list URLs.")
        issues = check_claim_evidence(document, (fact,))
        assert ids(issues) == ["claim-evidence-bridging-0-section-2"]
        assert issues[0].message.startswith('Section "Sitemaps"')

        sections[2] = ("Sitemaps", "As mentioned earlier, sitemap files list every canonical URL.")
        document = make_document(*sections, answer_box="Sitemaps list URLs.")
        assert check_claim_evidence(document, (fact,)) == ()

    def test_distant_support(self):
        filler = " ".join(["word"] * 800)
        document = make_document(
            ("Filler", filler),
            ("Redirects", "A 301 redirect passes link equity."),
            answer_box="Redirects pass equity.",
        )
        fact = Fact(id="fact-0", subject="301 redirect", predicate="passes", object="link equity", grounded=True,
                    source_section_id="section-1")
        issues = check_claim_evidence(document, (fact,))
        assert ids(issues) == ["claim-evidence-distance-0-section-1"]
        assert "1040 tokens" in issues[0].message
        assert len(issues[0].fix.alternatives) == 3

    def test_conclusion_restatement(self):
        document = make_document(
            ("Redirects", "A 301 redirect passes link equity."),
            ("Conclusion", "Thanks for reading."),
        )
        fact = Fact(id="fact-0", subject="301 redirect", predicate="passes", object="link equity",
                    evidence_text="passes link equity")
        issues = check_claim_evidence(document, (fact,))
        assert ids(issues) == ["claim-evidence-conclusion"]
        assert "0/1" in issues[0].message


class TestHeaderSpecificity:
    def test_generic_headers(self):
        assert is_generic_header("  Overview ")
        assert is_generic_header("FAQ")
        assert not is_generic_header("Overview of Redirects")

    def test_specific_header_scores_full(self):
        document = make_document(("Permanent 301 Redirect Behavior in Google Search",
                                  "Google Search follows the redirect."))
        section = document.sections[0]
        score = score_header(section.title, section)
        assert score.total == pytest.approx(1.0)
        assert score.missing == ()

    def test_bare_header_scores_zero(self):
        document = make_document(("Misc", "plain words only."))
        score = score_header("Misc", document.sections[0])
        assert score.total == 0
        assert score.missing == ("topic keyword", "qualifier word", "entity from content")

    def test_generic_run_and_vague_noun(self):
        document = make_document(
            ("Overview", "plain words only."),
            ("Benefits", "plain words only."),
            ("Redirect Details", "plain words only."),
        )
        issues = check_header_specificity(document.sections)
        assert ids(issues) == [
            "header-specificity-generic-section-0",
            "header-specificity-generic-section-1",
            "header-specificity-low-section-2",
            "header-specificity-vague-section-2",
            "header-specificity-consecutive",
        ]
        consecutive = issues[-1]
        assert consecutive.is_blocking
        assert consecutive.fix.suggestion == "Rename: Overview, Benefits"

    def test_run_broken_by_specific_header(self):
        document = make_document(
            ("Overview", "plain words only."),
            ("Permanent 301 Redirect Setup", "plain words only."),
            ("Benefits", "plain words only."),
        )
        issues = check_header_specificity(document.sections)
        assert "header-specificity-consecutive" not in ids(issues)


class TestFactDensity:
    def test_band_edges(self):
        assert density_band_score(0.8) == 1.0
        assert density_band_score(2.0) == 1.0
        assert density_band_score(0) == 0
        assert density_band_score(0.4) == pytest.approx(0.5)
        assert density_band_score(2.5) == pytest.approx(0.5)
        assert density_band_score(3.5) == 0
        assert [density_band(d) for d in (0.5, 1.0, 2.5)] == ["low", "ideal", "high"]

    def test_dead_zone_boundary(self):
        two = make_document(("Crawl Setup", "First paragraph.\n\nSecond paragraph."))
        one = make_document(("Crawl Setup", "Only paragraph."))
        dead = [i for i in check_fact_density(two, ()) if "dead-zone" in i.id]
        assert ids(dead) == ["fact-density-dead-zone-section-0"]
        assert not [i for i in check_fact_density(one, ()) if "dead-zone" in i.id]

    def test_mapped_fact_clears_dead_zone(self):
        fact = Fact(id="fact-0", subject="Crawl", predicate="runs", object="daily", source_section_id="section-0")
        document = make_document(("Crawl Setup", "First paragraph.\n\nSecond paragraph."), facts=[fact])
        assert not [i for i in check_fact_density(document, document.facts) if "dead-zone" in i.id]

    def test_low_and_high_density(self):
        low = make_document(("Crawl Setup", " ".join(["word"] * 100)))
        assert "fact-density-low" in ids(check_fact_density(low, ()))

        fact = Fact(id="fact-0", subject="Crawl", predicate="runs", object="daily", grounded=True)
        high = make_document(("Crawl Setup", " ".join(["word"] * 10)), facts=[fact])
        assert "fact-density-high" in ids(check_fact_density(high, high.facts))

    def test_hedging(self):
        document = make_document(("Crawl Setup", "Pages may rank. Sites might move. Links could break. Crawlers should wait."))
        assert "fact-density-hedge-section-0" in ids(check_fact_density(document, ()))

    def test_vibe_claims(self):
        document = make_document(("Crawl Setup", "Redirects help rankings and are powerful."))
        assert "fact-density-vibe-section-0" in ids(check_fact_density(document, ()))

    def test_score_without_words(self):
        document = make_document()
        score = score_fact_density(document, (), ())
        assert score.score == 0
        assert score.details["band"] == "low"
        assert score.details["density"] == "0.00"


class TestFactQuality:
    def test_missing_fields(self):
        fact = Fact(id="fact-0", subject="A", predicate="passes", object="", evidence_text="x")
        issues = check_fact_quality([fact])
        assert ids(issues) == ["fact-quality-structure-subject-0", "fact-quality-structure-object-0"]
        assert all(i.is_blocking for i in issues)

    def test_pronoun_subject(self):
        fact = Fact(id="fact-0", subject="It", predicate="passes", object="link equity", grounded=True)
        issues = check_fact_quality([fact])
        assert ids(issues) == ["fact-quality-pronoun-0"]
        assert issues[0].location.field == "subject"

    def test_compound_predicate_reported_before_vague(self):
        fact = Fact(id="fact-0", subject="Sitemap", predicate="helps and improves", object="crawling", grounded=True)
        assert ids(check_fact_quality([fact])) == ["fact-quality-compound-0"]

    def test_vague_predicate_needs_specific_object(self):
        vague = Fact(id="fact-0", subject="Sitemap", predicate="improves", object="rankings", grounded=True)
        specific = Fact(id="fact-1", subject="Sitemap", predicate="improves", object="rankings by 20%", grounded=True)
        assert ids(check_fact_quality([vague, specific])) == ["fact-quality-vague-0"]
        assert is_specific_object("x" * 31)
        assert not is_specific_object("rankings")

    def test_grounding(self):
        ungrounded = Fact(id="fact-0", subject="Sitemap", predicate="lists", object="URLs", grounded=False)
        unknown = Fact(id="fact-1", subject="Sitemap", predicate="lists", object="URLs")
        issues = check_fact_quality([ungrounded, unknown])
        assert ids(issues) == ["fact-quality-ungrounded-0", "fact-quality-no-evidence-1"]
        assert issues[0].is_blocking
        assert issues[1].score_impact == -0.5

    def test_score_counts_flagged_facts_once(self):
        bad = Fact(id="fact-0", subject="A", predicate="b", object="", grounded=True)
        good = Fact(id="fact-1", subject="Sitemap", predicate="lists", object="URLs", grounded=True)
        issues = check_fact_quality([bad, good])
        assert len(issues) == 3
        score = score_fact_quality([bad, good], issues)
        assert score.score == 5
        assert score.details["valid_facts"] == 1
        assert score.details["quality_rate"] == "50%"

    def test_no_facts(self):
        score = score_fact_quality((), ())
        assert score.score == 0
        assert score.details == {"message": "No facts to validate"}
