"""
Unit tests for textlab/tokenizer.py

Tests text cleaning, the punctuation-aware split, stopword filtering and
n-gram extraction.
"""

import math

import pandas as pd
import pytest

from textlab.tokenizer import (
    STOP_WORDS,
    build_stop_words,
    clean_text,
    tokenize,
    tokenize_ngrams,
    unnest_tokens,
)


class TestCleanText:
    """Tests for URL and entity removal."""

    def test_removes_urls(self):
        """Test that t.co and other links are stripped."""
        cleaned = clean_text("Join me https://t.co/abc123 and http://example.com/x?y=1 now")
        assert "http" not in cleaned
        assert "t.co" not in cleaned
        assert "Join me" in cleaned
        assert "now" in cleaned

    def test_removes_html_entities(self):
        """Test that named and numeric entities are stripped."""
        cleaned = clean_text("jobs &amp; wages &lt;3 &#8217; &#x2019;")
        assert "&" not in cleaned
        assert "jobs" in cleaned
        assert "wages" in cleaned


class TestTokenize:
    """Tests for the tokenize function."""

    def test_lowercases_and_drops_stopwords(self):
        """Test basic splitting."""
        assert tokenize("The Media is DISHONEST") == ["media", "dishonest"]

    def test_keeps_hashtags_and_mentions(self):
        """Test that # and @ stay attached to their word."""
        tokens = tokenize("Thank you @Ohio! #MakeAmericaGreatAgain")
        assert "@ohio" in tokens
        assert "#makeamericagreatagain" in tokens

    def test_inner_apostrophe_kept_trailing_split(self):
        """Test the apostrophe rule: kept before a word char, split otherwise."""
        tokens = tokenize("hillary's voters' choice", stop_words=frozenset())
        assert "hillary's" in tokens
        assert "voters" in tokens
        assert "voters'" not in tokens

    def test_drops_tokens_without_letters(self):
        """Test that numbers and bare symbols are filtered."""
        tokens = tokenize("2016 was 100% great #1 @", stop_words=frozenset())
        assert "2016" not in tokens
        assert "100" not in tokens
        assert "#1" not in tokens
        assert "@" not in tokens
        assert "great" in tokens

    def test_drops_links(self):
        """Test that URL fragments do not become tokens."""
        tokens = tokenize("Watch https://t.co/AbC123xyz")
        assert tokens == ["watch"]

    def test_twitter_noise_words_are_stopwords(self):
        """Test that rt and amp are removed."""
        assert tokenize("RT great rally amp") == ["great", "rally"]

    @pytest.mark.parametrize("value", [None, math.nan, 42])
    def test_malformed_input_yields_nothing(self, value):
        """Test that non-string input is dropped silently."""
        assert tokenize(value) == []

    def test_idempotent_on_joined_tokens(self):
        """Test re-tokenizing whitespace-joined tokens gives the same tokens."""
        texts = [
            "Crooked Hillary's 'disaster' &amp; the FAILING @nytimes... https://t.co/x1",
            "Thank you Ohio!!! #MAGA #Trump2016 don't stop'",
            "'tis the season: café, naïve — résumé",
        ]
        for text in texts:
            first = tokenize(text)
            assert tokenize(" ".join(first)) == first

    def test_custom_stop_words(self):
        """Test extra stopwords from configuration."""
        stop_words = build_stop_words(["Hillary"])
        assert "hillary" in stop_words
        assert tokenize("Hillary lies", stop_words) == ["lies"]

    def test_build_stop_words_without_extras(self):
        """Test that no extras returns the base list."""
        assert build_stop_words() is STOP_WORDS


class TestTokenizeNgrams:
    """Tests for n-gram extraction."""

    def test_bigrams(self):
        """Test contiguous bigrams without stopwords."""
        assert tokenize_ngrams("crooked hillary clinton", n=2) == [
            "crooked hillary",
            "hillary clinton",
        ]

    def test_bigram_with_stopword_dropped(self):
        """Test that a bigram touching a stopword is removed."""
        grams = tokenize_ngrams("crooked hillary great again", n=2)
        assert "crooked hillary" in grams
        assert "hillary great" in grams
        assert "great again" not in grams

    def test_invalid_n(self):
        """Test n below 1 is rejected."""
        with pytest.raises(ValueError):
            tokenize_ngrams("anything", n=0)


class TestUnnestTokens:
    """Tests for unnest_tokens."""

    def test_one_row_per_token(self, corpus_frame):
        """Test output columns and document ids."""
        tokens = unnest_tokens(corpus_frame)
        assert list(tokens.columns) == ["doc_id", "group", "word"]
        assert set(tokens["doc_id"]) <= set(corpus_frame["doc_id"])
        assert set(tokens["group"]) == {"android", "iphone"}

    def test_group_carried_through(self, corpus_frame):
        """Test that words keep their document's group."""
        tokens = unnest_tokens(corpus_frame)
        iphone_words = set(tokens.loc[tokens["group"] == "iphone", "word"])
        assert "#maga" in iphone_words
        assert "dishonest" not in iphone_words

    def test_bigram_mode(self, corpus_frame):
        """Test ngram > 1 produces space-joined tokens."""
        tokens = unnest_tokens(corpus_frame, ngram=2)
        assert tokens["word"].str.contains(" ").all()

    def test_empty_and_missing_text(self):
        """Test rows without usable text produce no tokens."""
        frame = pd.DataFrame({
            "doc_id": [1, 2],
            "group": ["a", "a"],
            "text": [None, "the and of"],
        })
        tokens = unnest_tokens(frame)
        assert tokens.empty
        assert list(tokens.columns) == ["doc_id", "group", "word"]
