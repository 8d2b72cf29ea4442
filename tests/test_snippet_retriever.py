"""
Tests for bag-of-words page retrieval
"""
import math
from core.snippet_retriever import find_top_relevant_snippets, make_snippet, tokenize
from model.catalog import PageText


class TestTokenize:
    def test_short_tokens_dropped_and_lowercased(self):
        assert tokenize("Is CS 311 a GOOD course?") == ["311", "good", "course"]

    def test_empty(self):
        assert tokenize("") == []


class TestFindTopRelevantSnippets:
    def setup_method(self):
        self.pages = [
            PageText(page=1, text="Welcome to the university bulletin."),
            PageText(page=2, text="Probation policy: students below 2.0 GPA are on probation."),
            PageText(page=3, text="Graduation requires 120 credits and a capstone."),
        ]

    def test_query_without_usable_tokens(self):
        assert find_top_relevant_snippets(self.pages, "is it ok?") == []
        assert find_top_relevant_snippets([], "probation policy") == []

    def test_zero_overlap_pages_excluded(self):
        hits = find_top_relevant_snippets(self.pages, "probation")

        assert [h.page for h in hits] == [2]

    def test_score_is_overlap_over_sqrt_token_count(self):
        hits = find_top_relevant_snippets(self.pages, "probation")
        tokens = tokenize(self.pages[1].text)

        assert math.isclose(hits[0].score, 2 / math.sqrt(len(tokens)))

    def test_ranked_and_capped(self):
        pages = self.pages + [PageText(page=4, text="probation probation probation")]

        hits = find_top_relevant_snippets(pages, "probation credits", top_k=2)

        assert len(hits) == 2
        assert hits[0].page == 4
        assert hits[0].score >= hits[1].score

    def test_ties_keep_page_order(self):
        pages = [PageText(page=1, text="capstone"), PageText(page=2, text="capstone")]

        hits = find_top_relevant_snippets(pages, "capstone")

        assert [h.page for h in hits] == [1, 2]


class TestMakeSnippet:
    def test_short_text_has_no_ellipses(self):
        assert make_snippet("capstone project", {"capstone"}, 100) == "capstone project"

    def test_window_starts_a_third_before_hit(self):
        text = "x" * 300 + " capstone " + "y" * 300

        snippet = make_snippet(text, {"capstone"}, 90)

        assert snippet.startswith("… ")
        assert snippet.endswith(" …")
        body = snippet[2:-2]
        assert len(body) <= 90
        assert body.index("capstone") == 30

    def test_earliest_token_wins(self):
        text = "a" * 200 + " alpha " + "b" * 200 + " beta"

        snippet = make_snippet(text, {"beta", "alpha"}, 30)

        assert "alpha" in snippet
