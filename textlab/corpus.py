"""
Corpus construction.

Turns fetched tweets or a bundled tweet CSV into a corpus frame with one row
per document, and summarizes how each group of documents was posted.
"""

import logging
from pathlib import Path

import pandas as pd

from .scraper import ScrapedTweet

logger = logging.getLogger("textlab.corpus")

CORPUS_COLUMNS = ["doc_id", "group", "text", "created_at", "source", "is_retweet", "username"]

LINK_PATTERN = r"https?://|t\.co/"
QUOTE_PATTERN = r'^\s*"'

# is_retweet cells read as true; anything else, blanks included, is an original
TRUE_VALUES = {"true", "1", "1.0", "yes", "y", "t"}


def _group_for(source: str | None, username: str, source_groups: dict[str, str] | None) -> str:
    if source_groups and source in source_groups:
        return source_groups[source]
    return username


def tweets_to_frame(
    tweets: list[ScrapedTweet],
    source_groups: dict[str, str] | None = None,
) -> pd.DataFrame:
    """
    Build a corpus frame from tweets.

    Args:
        tweets: Tweets to include.
        source_groups: Maps a posting client label to a group name. Tweets
            whose client is not in the mapping are grouped by username.

    Returns:
        DataFrame with CORPUS_COLUMNS, one row per tweet.
    """
    rows = [
        {
            "doc_id": tweet.id,
            "group": _group_for(tweet.source, tweet.username, source_groups),
            "text": tweet.text,
            "created_at": tweet.created_at,
            "source": tweet.source,
            "is_retweet": tweet.is_retweet,
            "username": tweet.username,
        }
        for tweet in tweets
    ]
    frame = pd.DataFrame(rows, columns=CORPUS_COLUMNS)
    logger.info(f"Corpus built from {len(frame)} tweets in {frame['group'].nunique()} groups")
    return frame


def load_corpus_csv(
    path: str | Path,
    source_groups: dict[str, str] | None = None,
) -> pd.DataFrame:
    """
    Load a tweet dataset from CSV.

    Only a `text` column is required. `id`, `created_at`, `source`,
    `group`, `username` and `is_retweet` are used when present.

    Raises:
        ValueError: If the file has no `text` column.
    """
    raw = pd.read_csv(path)
    if "text" not in raw.columns:
        raise ValueError(f"{path} has no 'text' column")

    frame = pd.DataFrame(index=raw.index)
    frame["doc_id"] = raw["id"] if "id" in raw.columns else raw.index
    frame["text"] = raw["text"]
    frame["created_at"] = pd.to_datetime(raw["created_at"], utc=True) if "created_at" in raw.columns else pd.NaT
    frame["source"] = raw["source"] if "source" in raw.columns else None
    if "is_retweet" in raw.columns:
        frame["is_retweet"] = raw["is_retweet"].astype(str).str.strip().str.lower().isin(TRUE_VALUES)
    else:
        frame["is_retweet"] = False
    frame["username"] = raw["username"] if "username" in raw.columns else "unknown"

    if "group" in raw.columns:
        frame["group"] = raw["group"]
    elif "source" in raw.columns and source_groups:
        frame["group"] = raw["source"].map(source_groups).fillna(frame["username"])
    else:
        frame["group"] = frame["username"]

    frame = frame[CORPUS_COLUMNS].reset_index(drop=True)
    logger.info(f"Loaded {len(frame)} documents from {path}")
    return frame


def filter_corpus(
    frame: pd.DataFrame,
    drop_retweets: bool = True,
    drop_quoted: bool = True,
    groups: list[str] | None = None,
) -> pd.DataFrame:
    """
    Drop documents that would skew word counts.

    Args:
        frame: Corpus frame.
        drop_retweets: Remove retweets (text written by someone else).
        drop_quoted: Remove manual quote-tweets, i.e. text starting with a
            double quote.
        groups: Keep only these groups. None keeps all.
    """
    mask = pd.Series(True, index=frame.index)
    if drop_retweets:
        mask &= ~frame["is_retweet"].fillna(False).astype(bool)
    if drop_quoted:
        mask &= ~frame["text"].fillna("").str.contains(QUOTE_PATTERN, regex=True)
    if groups is not None:
        mask &= frame["group"].isin(groups)

    filtered = frame[mask].reset_index(drop=True)
    logger.info(f"Filtered corpus: kept {len(filtered)} of {len(frame)} documents")
    return filtered


def hour_of_day_share(frame: pd.DataFrame, tz: str | None = None) -> pd.DataFrame:
    """
    Share of each group's documents posted in each hour of the day.

    Args:
        frame: Corpus frame with `created_at`.
        tz: Timezone to convert to before taking the hour, e.g.
            "America/New_York". Naive timestamps are taken as UTC.

    Returns:
        DataFrame with columns group, hour, n, share.
    """
    stamps = pd.to_datetime(frame["created_at"], utc=True)
    if tz:
        stamps = stamps.dt.tz_convert(tz)

    hours = pd.DataFrame({"group": frame["group"], "hour": stamps.dt.hour}).dropna()
    hours["hour"] = hours["hour"].astype(int)

    counts = hours.groupby(["group", "hour"]).size().reset_index(name="n")
    counts["share"] = counts["n"] / counts.groupby("group")["n"].transform("sum")
    return counts


def source_summary(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Per group: number of documents, share containing a link or picture, and
    share that are manual quote-tweets.
    """
    text = frame["text"].fillna("")
    flags = pd.DataFrame({
        "group": frame["group"],
        "has_link": text.str.contains(LINK_PATTERN, regex=True),
        "is_quoted": text.str.contains(QUOTE_PATTERN, regex=True),
    })
    summary = flags.groupby("group").agg(
        documents=("has_link", "size"),
        link_share=("has_link", "mean"),
        quoted_share=("is_quoted", "mean"),
    )
    return summary.reset_index()
