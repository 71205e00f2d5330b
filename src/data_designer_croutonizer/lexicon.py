from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Lexicon:
    """Word lists and patterns behind the rule heuristics.

    Every table is a tuple so a ``Lexicon`` stays hashable and its compiled
    patterns can be cached. Swap individual tables with ``dataclasses.replace``.
    """

    entity_stopwords: tuple[str, ...] = (
        "The", "This", "That", "These", "Those", "When", "Where", "Why", "How",
        "It", "Its", "They", "Their", "Them", "Such", "Here", "There",
        "What", "Which", "Who",
    )
    paragraph_start_pronouns: tuple[str, ...] = (
        "it", "this", "that", "these", "those", "they", "their", "its", "them",
        "such", "here", "there",
    )
    density_pronouns: tuple[str, ...] = (
        "it", "this", "that", "these", "those", "they", "their", "its", "them",
    )
    summary_pronouns: tuple[str, ...] = ("it", "this", "that", "these", "those")
    summary_vague_words: tuple[str, ...] = ("helps", "improves", "better", "good", "important")
    action_words: tuple[str, ...] = (
        "defines", "explains", "describes", "provides", "enables", "requires",
        "supports", "implements", "handles", "processes", "manages", "controls",
        "validates", "generates",
    )

    bridging_phrases: tuple[str, ...] = (
        "as mentioned earlier", "as discussed above", "this applies to",
        "returning to", "building on", "as stated in",
    )
    conclusion_titles: tuple[str, ...] = ("conclusion", "summary", "takeaway", "bottom line", "final")

    generic_headers: tuple[str, ...] = (
        "overview", "introduction", "conclusion", "summary", "the bottom line",
        "pricing", "benefits", "faq", "features", "about", "details", "more",
        "background",
    )
    topic_keywords: tuple[str, ...] = (
        "redirect", "canonical", "indexing", "crawling", "sitemap",
        "schema", "structured data", "meta", "robots", "seo",
        "http", "https", "ssl", "tls", "dns", "cdn",
        "301", "302", "404", "500", "status code",
        "link equity", "pagerank", "backlink", "anchor text",
        "keyword", "serp", "ranking", "organic", "algorithm",
        "google", "bing", "search engine", "crawler", "bot",
    )
    qualifiers: tuple[str, ...] = (
        "permanent", "temporary", "automatic", "manual",
        "best", "worst", "common", "rare", "typical",
        "advanced", "basic", "simple", "complex",
        "fast", "slow", "efficient", "optimal",
        "correct", "incorrect", "proper", "improper",
        "during", "after", "before", "while",
        "migration", "implementation", "configuration", "setup",
    )
    vague_nouns: tuple[str, ...] = (
        "things", "stuff", "details", "information", "data",
        "aspects", "elements", "factors", "points", "items",
    )
    header_actions: tuple[str, ...] = (
        "implementation", "configuration", "setup", "migration",
        "optimization", "troubleshooting", "monitoring", "testing",
        "analysis", "comparison", "integration", "deployment",
    )
    header_contexts: tuple[str, ...] = (
        "SEO", "site migration", "URL changes", "search engines",
        "web development", "best practices", "performance",
        "user experience", "ranking", "indexing",
    )

    hedge_words: tuple[str, ...] = (
        "can", "may", "might", "could", "would", "should",
        "often", "usually", "generally", "typically", "sometimes",
        "possibly", "probably", "likely", "perhaps", "potentially",
    )
    vibe_claim_patterns: tuple[str, ...] = (
        r"\b(better|improves?|helps?|enhances?)\b(?!\s+(?:by|to|than|with)\s+\d)",
        r"\bpowerful\b(?!\s+(?:than|as))",
        r"\brobust\b(?!\s+against)",
        r"\beffective\b(?!\s+(?:at|for|in)\s+\w+ing)",
        r"\bimportant\b(?!\s+(?:because|for|to))",
        r"\buseful\b(?!\s+(?:for|when|because))",
    )

    fact_pronouns: tuple[str, ...] = (
        "it", "this", "that", "these", "those", "they", "them", "their",
        "he", "she", "his", "her",
    )
    vague_predicates: tuple[str, ...] = (
        "helps", "improves", "supports", "enhances", "enables",
        "provides", "offers", "gives", "allows", "facilitates",
    )
    measure_words: tuple[str, ...] = ("by", "to", "than", "percent", "x", "times", "ratio")


DEFAULT_LEXICON = Lexicon()

# ---------------------------------------------------------------------------
# Compiled pattern cache
# ---------------------------------------------------------------------------


@lru_cache(maxsize=None)
def word_regex(words: tuple[str, ...]) -> re.Pattern[str]:
    """Case-insensitive whole-word alternation over ``words``."""
    return re.compile(r"\b(" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE)


@lru_cache(maxsize=None)
def leading_word_regex(words: tuple[str, ...]) -> re.Pattern[str]:
    """Like :func:`word_regex` but anchored at the start of the (stripped) text."""
    return re.compile(r"^(" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE)


@lru_cache(maxsize=None)
def compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)
