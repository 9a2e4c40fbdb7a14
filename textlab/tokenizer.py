"""
Tokenization and cleaning.

Splits tweet text into lowercase word tokens while keeping hashtags,
@mentions and in-word apostrophes intact, then drops stopwords and tokens
that carry no letters.
"""

import logging
import re
from collections.abc import Iterable

import pandas as pd
from spacy.lang.en.stop_words import STOP_WORDS as SPACY_STOP_WORDS

logger = logging.getLogger("textlab.tokenizer")

URL_PATTERN = re.compile(r"https?://\S+")
HTML_ENTITY_PATTERN = re.compile(r"&(?:[A-Za-z]+|#\d+|#[xX][0-9A-Fa-f]+);")

# Anything that can't be part of a word, hashtag or mention. An apostrophe is
# a separator unless a word character follows it ("don't" stays whole).
SPLIT_PATTERN = re.compile(r"[^A-Za-z_\d#@']|'(?![A-Za-z_\d#@])")
LETTER_PATTERN = re.compile(r"[a-z]")

# Twitter noise that survives cleaning
TWITTER_STOP_WORDS = {"rt", "amp", "via"}

STOP_WORDS: frozenset[str] = frozenset(SPACY_STOP_WORDS) | TWITTER_STOP_WORDS


def build_stop_words(extra: Iterable[str] | None = None) -> frozenset[str]:
    """STOP_WORDS plus any extra words, lowercased."""
    if not extra:
        return STOP_WORDS
    return STOP_WORDS | {w.lower() for w in extra}


def clean_text(text: str) -> str:
    """Remove URLs and HTML entities."""
    text = URL_PATTERN.sub(" ", text)
    text = HTML_ENTITY_PATTERN.sub(" ", text)
    return text


def _split(text) -> list[str]:
    if not isinstance(text, str):
        return []
    pieces = SPLIT_PATTERN.split(clean_text(text).lower())
    return [p for p in pieces if p]


def _keep(token: str, stop_words: frozenset[str]) -> bool:
    return token not in stop_words and LETTER_PATTERN.search(token) is not None


def tokenize(text, stop_words: frozenset[str] | None = None) -> list[str]:
    """
    Split text into word tokens.

    Non-string input (None, NaN) yields no tokens.

    Args:
        text: Raw document text.
        stop_words: Words to drop. Defaults to STOP_WORDS.
    """
    if stop_words is None:
        stop_words = STOP_WORDS
    return [t for t in _split(text) if _keep(t, stop_words)]


def tokenize_ngrams(text, n: int = 2, stop_words: frozenset[str] | None = None) -> list[str]:
    """
    Contiguous n-grams joined by single spaces.

    N-grams are taken over the unfiltered token stream; an n-gram is dropped
    if any of its words is a stopword or has no letters.
    """
    if n < 1:
        raise ValueError("n must be at least 1")
    if stop_words is None:
        stop_words = STOP_WORDS

    tokens = _split(text)
    grams = []
    for i in range(len(tokens) - n + 1):
        window = tokens[i:i + n]
        if all(_keep(t, stop_words) for t in window):
            grams.append(" ".join(window))
    return grams


def unnest_tokens(
    frame: pd.DataFrame,
    stop_words: frozenset[str] | None = None,
    text_column: str = "text",
    ngram: int = 1,
) -> pd.DataFrame:
    """
    One row per (document, token).

    Args:
        frame: Corpus frame with doc_id, group and a text column.
        stop_words: Words to drop. Defaults to STOP_WORDS.
        text_column: Column holding the raw text.
        ngram: 1 for words, 2 for bigrams, and so on.

    Returns:
        DataFrame with columns doc_id, group, word.
    """
    rows = []
    for doc_id, group, text in zip(frame["doc_id"], frame["group"], frame[text_column]):
        if ngram == 1:
            tokens = tokenize(text, stop_words)
        else:
            tokens = tokenize_ngrams(text, ngram, stop_words)
        rows.extend((doc_id, group, token) for token in tokens)

    tokens = pd.DataFrame(rows, columns=["doc_id", "group", "word"])
    logger.info(f"Tokenized {len(frame)} documents into {len(tokens)} tokens")
    return tokens
