from collections import deque

import pytest

from data_designer_croutonizer.core import CroutonizerError, analyze_content, build_content
from data_designer_croutonizer.hyperparameters import Hyperparameters

SCENARIO_A = {
    "title": "How 301 Redirects Pass Link Equity",
    "answerBox": "A 301 redirect passes link equity from an old URL to a new URL without a measurable loss.",
    "sections": [
        {
            "heading": "Permanent 301 Redirect Link Equity Transfer",
            "content": (
                "A 301 redirect passes link equity from the old URL to the new URL. Google treats the 301 "
                "redirect as a permanent move and consolidates ranking signals on the destination page within weeks."
                "\n\nCrouton Summary: A 301 redirect passes link equity and consolidates ranking signals on the "
                "new destination URL."
            ),
        },
        {
            "heading": "Redirect Chains and Crawl Budget for Googlebot",
            "content": (
                "Redirect chains waste crawl budget because Googlebot follows at most ten hops. Each extra hop "
                "adds latency for users and delays indexing of the final destination page."
                "\n\nCrouton Summary: Redirect chains waste crawl budget, so site owners point each old URL "
                "directly at the final destination."
            ),
        },
    ],
    "keyFacts": (
        "301 redirect | passes | link equity\n"
        "Google | treats | the 301 redirect as a permanent move\n"
        "Redirect chains | waste | crawl budget\n"
        "Googlebot | follows | at most ten hops"
    ),
}

SCENARIO_B = {
    "title": "Redirects",
    "answerBox": "It is important for SEO. This helps rankings.",
    "sections": [
        {"heading": "Overview", "content": "It helps websites rank. " + " ".join(["lorem ipsum dolor sit amet"] * 110)},
    ],
    "keyFacts": "",
}

CLEAN = {
    "title": "Permanent and Temporary Redirects for Google Search",
    "answerBox": "A 301 redirect tells Google the page moved permanently to a new URL.",
    "sections": [
        {
            "heading": "Permanent 301 Redirect Behavior in Google Search",
            "content": (
                "Google Search transfers ranking signals through a permanent 301 redirect within a few weeks. "
                "Googlebot recrawls the old URL and indexes the destination page. Site owners point every retired "
                "address at one final destination and avoid chains of several hops. Server logs show the 301 "
                "status code on each request for the retired address."
            ),
        },
        {
            "heading": "Temporary 302 Redirect Use During Site Maintenance",
            "content": (
                "Site Maintenance windows call for a temporary 302 redirect. Google keeps the original URL indexed "
                "while the 302 redirect stays active. Engineers remove the 302 redirect once the maintenance page "
                "goes offline and the original page returns. Monitoring tools confirm the original URL answers "
                "with a 200 status code after the switch."
            ),
        },
    ],
    "keyFacts": [
        {
            "subject": "301 redirect",
            "predicate": "transfers",
            "object": "ranking signals to the destination page",
            "evidence_text": "transfers ranking signals through a permanent 301 redirect",
        },
        {
            "subject": "302 redirect",
            "predicate": "keeps",
            "object": "the original URL indexed",
            "evidence_text": "keeps the original URL indexed",
        },
    ],
}


def issue_ids(result):
    return [i["id"] for i in result["issues"]]


class TestAnalyzeContent:
    def test_well_formed_article(self):
        result = analyze_content(SCENARIO_A)
        score = result["score"]
        assert score["blocking_issues"] == 0
        assert score["status"] != "errors"
        assert score["breakdown"]["claimEvidence"]["mapped"] == 4
        assert score["breakdown"]["claimEvidence"]["total"] == 4

    def test_pronoun_heavy_article(self):
        result = analyze_content(SCENARIO_B)
        ids = issue_ids(result)
        assert "claim-evidence-no-facts" in ids
        assert "section-anchor-section-0" in ids
        assert "entity-persistence-start-section-0-0" in ids
        no_facts = next(i for i in result["issues"] if i["id"] == "claim-evidence-no-facts")
        assert no_facts["score_impact"] == -20
        assert result["score"]["breakdown"]["claimEvidence"]["score"] == 0
        assert result["score"]["status"] == "errors"

    def test_clean_article_scores_100(self):
        result = analyze_content(CLEAN)
        assert result["issues"] == []
        assert result["score"]["total"] == 100
        assert result["score"]["status"] == "clean"
        assert result["score"]["top_fixes"] == []

    def test_idempotent(self):
        assert analyze_content(SCENARIO_A) == analyze_content(SCENARIO_A)
        assert analyze_content(SCENARIO_B) == analyze_content(SCENARIO_B)

    def test_empty_input(self):
        for content in ({}, "not a mapping"):
            result = analyze_content(content)
            assert issue_ids(result) == ["claim-evidence-no-facts"]
            assert result["score"]["total"] == 55
            assert result["score"]["status"] == "errors"
            assert result["document"] == {"total_words": 0, "total_tokens": 0, "section_count": 0}

    def test_key_facts_argument_overrides_content(self):
        result = analyze_content(SCENARIO_B, key_facts="Redirects | rank | websites")
        assert "claim-evidence-no-facts" not in issue_ids(result)
        assert result["score"]["breakdown"]["claimEvidence"]["total"] == 1

    def test_extracted_facts_argument(self):
        result = analyze_content(CLEAN, facts=[])
        quality = result["score"]["breakdown"]["factQuality"]
        assert quality["score"] == 0
        assert quality["message"] == "No facts to validate"
        assert result["score"]["total"] < 100

    def test_result_shape(self):
        result = analyze_content(SCENARIO_A)
        assert set(result) == {"score", "issues", "document"}
        issue = result["issues"][0]
        assert set(issue) == {
            "id", "rule", "type", "severity", "location", "message", "explanation", "score_impact", "fix",
        }
        assert result["document"]["section_count"] == 3

    def test_parsed_document_on_request(self):
        assert "parsed" not in analyze_content(CLEAN)
        parsed = analyze_content(CLEAN, include_document=True)["parsed"]
        assert [s["id"] for s in parsed["sections"]] == ["answer-box", "section-0", "section-1"]
        assert parsed["sections"][0]["isAnswerBox"] is True
        assert parsed["facts"][1] == {
            "id": "fact-1",
            "subject": "302 redirect",
            "predicate": "keeps",
            "object": "the original URL indexed",
            "evidence_text": "keeps the original URL indexed",
        }
        assert parsed["metadata"]["section_count"] == 3

    def test_failures_are_wrapped(self):
        broken = Hyperparameters(tokens_per_word="x")
        with pytest.raises(CroutonizerError) as excinfo:
            analyze_content(SCENARIO_A, hyperparameters=broken)
        assert excinfo.value.operation == "croutonize"
        assert isinstance(excinfo.value.__cause__, TypeError)
        assert str(excinfo.value).startswith("[croutonize]")


class TestBuildContent:
    def test_json_sections(self):
        content = build_content("Title", '[{"heading": "H", "content": "C"}]', answer_box="  ", key_facts="a | b | c")
        assert content == {
            "title": "Title",
            "sections": [{"heading": "H", "content": "C"}],
            "keyFacts": "a | b | c",
        }

    def test_loose_values(self):
        content = build_content(None, None, answer_box="Short answer.")
        assert content == {"title": "", "sections": [], "answerBox": "Short answer."}
        assert build_content("T", "  ")["sections"] == []

    def test_any_iterable_of_sections(self):
        rows = deque([{"heading": "H", "content": "C"}])
        assert build_content("T", rows)["sections"] == [{"heading": "H", "content": "C"}]
        assert build_content("T", (s for s in rows))["sections"] == [{"heading": "H", "content": "C"}]

    def test_unusable_sections_dropped(self):
        assert build_content("T", 42)["sections"] == []
        assert build_content("T", {"heading": "H", "content": "C"})["sections"] == []
        assert build_content("T", '"just a string"')["sections"] == []

    def test_invalid_json(self):
        with pytest.raises(CroutonizerError) as excinfo:
            build_content("Title", "[not json")
        assert excinfo.value.operation == "build_content"
