"""
Word frequencies and group comparisons.
"""

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger("textlab.frequency")


def count_words(tokens: pd.DataFrame, by: str | None = "group", term: str = "word") -> pd.DataFrame:
    """
    Count token occurrences.

    Args:
        tokens: Token frame from tokenizer.unnest_tokens.
        by: Column to count within (e.g. "group" or "doc_id"). None counts
            over the whole corpus.
        term: Column holding the token.

    Returns:
        DataFrame with columns [by,] term, n sorted by descending n.
    """
    keys = [by, term] if by else [term]
    counts = tokens.groupby(keys).size().reset_index(name="n")
    return counts.sort_values(["n", *keys], ascending=[False] + [True] * len(keys)).reset_index(drop=True)


def term_frequency(counts: pd.DataFrame, by: str = "group") -> pd.DataFrame:
    """Add the per-group total and tf = n / total."""
    result = counts.copy()
    result["total"] = result.groupby(by)["n"].transform("sum")
    result["tf"] = result["n"] / result["total"]
    return result


def top_words(counts: pd.DataFrame, n: int = 20, by: str | None = "group") -> pd.DataFrame:
    """The n most frequent words, per group when `by` is given."""
    if by is None:
        return counts.nlargest(n, "n", keep="first").reset_index(drop=True)
    return (
        counts.sort_values("n", ascending=False, kind="mergesort")
        .groupby(by, sort=True)
        .head(n)
        .reset_index(drop=True)
    )


def log_ratio(
    tokens: pd.DataFrame,
    group_a: str,
    group_b: str,
    min_count: int = 1,
    base: float = 2,
    by: str = "group",
    term: str = "word",
) -> pd.DataFrame:
    """
    How much more likely each word is to come from group_a than group_b.

    Each group's counts get one added and are divided by the group's
    smoothed total; the log of the ratio of those frequencies is positive
    for words characteristic of group_a.

    Args:
        tokens: Token frame.
        group_a: Numerator group.
        group_b: Denominator group.
        min_count: Minimum occurrences across both groups for a word to be kept.
        base: Logarithm base.

    Returns:
        DataFrame with columns term, group_a, group_b (raw counts) and
        log_ratio, sorted by descending log_ratio.

    Raises:
        ValueError: If either group does not occur in the tokens.
    """
    present = set(tokens[by].unique())
    missing = [g for g in (group_a, group_b) if g not in present]
    if missing:
        raise ValueError(f"Groups not found in tokens: {', '.join(map(str, missing))}")

    subset = tokens[tokens[by].isin([group_a, group_b])]
    wide = (
        subset.groupby([term, by]).size()
        .unstack(by, fill_value=0)
        .reindex(columns=[group_a, group_b], fill_value=0)
    )
    wide = wide[wide.sum(axis=1) >= min_count]

    smoothed = (wide + 1) / (wide + 1).sum(axis=0)
    ratio = np.log(smoothed[group_a] / smoothed[group_b]) / np.log(base)

    result = wide.reset_index()
    result.columns.name = None
    result["log_ratio"] = ratio.to_numpy()
    result = result.sort_values(["log_ratio", term], ascending=[False, True]).reset_index(drop=True)
    logger.info(f"Log ratio {group_a} vs {group_b}: {len(result)} words")
    return result


def top_log_ratio(ratios: pd.DataFrame, n: int = 15) -> pd.DataFrame:
    """
    The n most characteristic words on each side.

    `direction` names the group the word leans towards, taken from the
    count columns log_ratio produced.
    """
    group_a, group_b = ratios.columns[1], ratios.columns[2]
    ratios = ratios.copy()
    ratios["direction"] = np.where(ratios["log_ratio"] >= 0, group_a, group_b)
    positive = ratios[ratios["log_ratio"] > 0].nlargest(n, "log_ratio")
    negative = ratios[ratios["log_ratio"] < 0].nsmallest(n, "log_ratio")
    return pd.concat([positive, negative]).reset_index(drop=True)
