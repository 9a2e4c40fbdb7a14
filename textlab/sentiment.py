"""
Lexicon-based sentiment scoring and group comparison.

Words are tagged with sentiment categories by dictionary lookup (NRC
word-emotion style: anger, fear, joy, positive, negative, ...). Groups are
compared per category with an exact two-sample Poisson rate test: how much
more often does group A use words of this category, per word written,
than group B?
"""

import logging
import math
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

import pandas as pd
from scipy.stats import binomtest

from .frequency import log_ratio

logger = logging.getLogger("textlab.sentiment")

BUNDLED_LEXICON = "sentiment_lexicon.tsv"


class Lexicon:
    """Maps words to the set of sentiment categories they carry."""

    def __init__(self, entries: dict[str, set[str]]):
        self._entries = {word.lower(): frozenset(cats) for word, cats in entries.items() if cats}

    @classmethod
    def from_pairs(cls, pairs) -> "Lexicon":
        """Build from (word, category) pairs."""
        entries: dict[str, set[str]] = {}
        for word, category in pairs:
            entries.setdefault(str(word).strip().lower(), set()).add(str(category).strip().lower())
        return cls(entries)

    @classmethod
    def load(cls, path: str | Path) -> "Lexicon":
        """
        Load a lexicon file.

        Two layouts are accepted, tab- or comma-separated, with or without a
        header row:
          - NRC word-emotion: word, category, 0/1 flag (only 1 rows count)
          - two columns: word, category

        Raises:
            ValueError: If the file has neither layout.
        """
        path = Path(path)
        sep = "," if path.suffix.lower() == ".csv" else "\t"
        try:
            raw = pd.read_csv(path, sep=sep, header=None, comment="#", dtype=str)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ValueError(f"Unreadable lexicon {path}: {e}") from e

        raw = raw.dropna(how="all")
        if not raw.empty and str(raw.iloc[0, 0]).strip().lower() == "word":
            raw = raw.iloc[1:]

        if raw.shape[1] == 3:
            flags = pd.to_numeric(raw[2], errors="coerce")
            raw = raw[flags == 1]
        elif raw.shape[1] != 2:
            raise ValueError(f"Lexicon {path} must have 2 or 3 columns, found {raw.shape[1]}")

        raw = raw.dropna(subset=[0, 1])
        lexicon = cls.from_pairs(zip(raw[0], raw[1]))
        logger.info(f"Loaded lexicon from {path}: {len(lexicon)} words, {len(lexicon.sentiments)} categories")
        return lexicon

    @classmethod
    def bundled(cls) -> "Lexicon":
        """The NRC-format lexicon shipped with textlab."""
        with resources.as_file(resources.files("textlab") / "data" / BUNDLED_LEXICON) as path:
            return cls.load(path)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word: str) -> bool:
        return word in self._entries

    def categories_for(self, word: str) -> frozenset[str]:
        return self._entries.get(word, frozenset())

    @property
    def sentiments(self) -> list[str]:
        return sorted({c for cats in self._entries.values() for c in cats})

    def to_frame(self) -> pd.DataFrame:
        """One row per (word, sentiment)."""
        rows = [(word, cat) for word, cats in self._entries.items() for cat in sorted(cats)]
        return pd.DataFrame(rows, columns=["word", "sentiment"])


@dataclass
class PoissonTestResult:
    """Rate ratio of two Poisson counts with an exact confidence interval."""
    estimate: float
    conf_low: float
    conf_high: float
    p_value: float
    conf_level: float = 0.95


def _odds_to_ratio(p: float, t1: float, t2: float) -> float:
    if p >= 1:
        return math.inf
    return p / (1 - p) * t2 / t1


def poisson_test(x1: int, t1: float, x2: int, t2: float, conf_level: float = 0.95) -> PoissonTestResult:
    """
    Exact two-sample Poisson test of equal rates.

    Conditional on x1 + x2, x1 is binomial with success probability
    t1 / (t1 + t2) under the null. The binomial interval is mapped back to
    the rate-ratio scale.

    Args:
        x1: Event count in the first sample.
        t1: Exposure (e.g. total words) of the first sample.
        x2: Event count in the second sample.
        t2: Exposure of the second sample.
        conf_level: Confidence level of the interval.

    Returns:
        PoissonTestResult; all NaN when both counts are zero.

    Raises:
        ValueError: On negative counts or non-positive exposures.
    """
    if x1 < 0 or x2 < 0:
        raise ValueError("counts must be non-negative")
    if t1 <= 0 or t2 <= 0:
        raise ValueError("exposures must be positive")

    n = int(x1) + int(x2)
    if n == 0:
        nan = float("nan")
        return PoissonTestResult(nan, nan, nan, nan, conf_level)

    test = binomtest(int(x1), n, p=t1 / (t1 + t2))
    ci = test.proportion_ci(confidence_level=conf_level, method="exact")

    estimate = (x1 / t1) / (x2 / t2) if x2 > 0 else math.inf
    return PoissonTestResult(
        estimate=estimate,
        conf_low=_odds_to_ratio(ci.low, t1, t2),
        conf_high=_odds_to_ratio(ci.high, t1, t2),
        p_value=test.pvalue,
        conf_level=conf_level,
    )


def sentiment_counts(tokens: pd.DataFrame, lexicon: Lexicon, by: str = "group") -> pd.DataFrame:
    """
    Sentiment-tagged word counts per group.

    Returns:
        DataFrame with columns [by], sentiment, words, total_words; one row
        for every group and category, zero-filled.
    """
    totals = tokens.groupby(by).size().rename("total_words")
    tagged = tokens.merge(lexicon.to_frame(), on="word", how="inner")
    counts = tagged.groupby([by, "sentiment"]).size()

    grid = pd.MultiIndex.from_product([totals.index, lexicon.sentiments], names=[by, "sentiment"])
    counts = counts.reindex(grid, fill_value=0).rename("words").reset_index()
    return counts.merge(totals.reset_index(), on=by)


def compare_sentiment(
    tokens: pd.DataFrame,
    lexicon: Lexicon,
    group_a: str,
    group_b: str,
    conf_level: float = 0.95,
    by: str = "group",
) -> pd.DataFrame:
    """
    Per sentiment category, the rate ratio of group_a to group_b.

    Rates are tagged words per total word. An estimate of 2 means group_a
    uses words of that category twice as often.

    Returns:
        DataFrame with columns sentiment, <group_a>_words, <group_b>_words,
        estimate, conf_low, conf_high, p_value, sorted by descending estimate.

    Raises:
        ValueError: If either group has no tokens.
    """
    counts = sentiment_counts(tokens, lexicon, by=by)
    present = set(counts[by].unique())
    missing = [g for g in (group_a, group_b) if g not in present]
    if missing:
        raise ValueError(f"Groups not found in tokens: {', '.join(map(str, missing))}")

    a = counts[counts[by] == group_a].set_index("sentiment")
    b = counts[counts[by] == group_b].set_index("sentiment")

    rows = []
    for sentiment in lexicon.sentiments:
        x1 = int(a.at[sentiment, "words"])
        x2 = int(b.at[sentiment, "words"])
        result = poisson_test(
            x1, a.at[sentiment, "total_words"],
            x2, b.at[sentiment, "total_words"],
            conf_level=conf_level,
        )
        rows.append({
            "sentiment": sentiment,
            f"{group_a}_words": x1,
            f"{group_b}_words": x2,
            "estimate": result.estimate,
            "conf_low": result.conf_low,
            "conf_high": result.conf_high,
            "p_value": result.p_value,
        })

    comparison = pd.DataFrame(rows)
    if not comparison.empty:
        comparison = comparison.sort_values("estimate", ascending=False).reset_index(drop=True)
    logger.info(f"Compared {len(comparison)} sentiment categories: {group_a} vs {group_b}")
    return comparison


def sentiment_word_ratios(
    tokens: pd.DataFrame,
    lexicon: Lexicon,
    group_a: str,
    group_b: str,
    base: float = 2,
    by: str = "group",
) -> pd.DataFrame:
    """
    Log ratios of the sentiment-tagged words.

    Shows which words drive a category's difference between the groups.
    Ratios are smoothed over the whole vocabulary, not just tagged words.

    Returns:
        DataFrame with columns word, <group_a>, <group_b>, log_ratio, sentiment.
    """
    ratios = log_ratio(tokens, group_a, group_b, min_count=1, base=base, by=by)
    return ratios.merge(lexicon.to_frame(), on="word", how="inner")


def document_sentiment(tokens: pd.DataFrame, lexicon: Lexicon, document: str = "doc_id") -> pd.DataFrame:
    """
    Net positive-minus-negative score per document.

    Documents with no tagged words score 0.

    Returns:
        DataFrame with columns document, group (when present), positive,
        negative, sentiment.
    """
    keys = [document, "group"] if "group" in tokens.columns else [document]
    docs = tokens[keys].drop_duplicates().set_index(document)

    tagged = tokens.merge(lexicon.to_frame(), on="word", how="inner")
    polar = tagged[tagged["sentiment"].isin(["positive", "negative"])]
    scores = polar.groupby([document, "sentiment"]).size().unstack("sentiment", fill_value=0)
    scores = scores.reindex(columns=["positive", "negative"], fill_value=0)

    result = docs.join(scores, how="left").fillna({"positive": 0, "negative": 0})
    result[["positive", "negative"]] = result[["positive", "negative"]].astype(int)
    result["sentiment"] = result["positive"] - result["negative"]
    return result.reset_index()
