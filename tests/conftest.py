"""
Shared pytest fixtures for textlab tests.

This module provides:
- Sample tweets posted from two clients
- Corpus and token frames built from them
- A small in-memory sentiment lexicon
- A mocked twscrape API
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pandas as pd
import pytest

from textlab.corpus import tweets_to_frame
from textlab.scraper import ScrapedTweet
from textlab.sentiment import Lexicon
from textlab.tokenizer import unnest_tokens
from tests.fixtures import SOURCE_GROUPS, make_device_tweets, make_sample_tweet


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_tweet() -> ScrapedTweet:
    """Provide a single sample tweet."""
    return make_sample_tweet()


@pytest.fixture
def device_tweets() -> list[ScrapedTweet]:
    """Provide tweets split between Android and iPhone clients."""
    return make_device_tweets()


@pytest.fixture
def corpus_frame(device_tweets) -> pd.DataFrame:
    """Corpus frame grouped by posting client."""
    return tweets_to_frame(device_tweets, SOURCE_GROUPS)


@pytest.fixture
def device_tokens(corpus_frame) -> pd.DataFrame:
    """Token frame of the device corpus."""
    return unnest_tokens(corpus_frame)


@pytest.fixture
def small_lexicon() -> Lexicon:
    """A handful of NRC-style entries."""
    return Lexicon.from_pairs([
        ("crooked", "negative"),
        ("dishonest", "anger"),
        ("dishonest", "negative"),
        ("disaster", "fear"),
        ("disaster", "negative"),
        ("sad", "negative"),
        ("sad", "sadness"),
        ("great", "positive"),
        ("great", "joy"),
        ("wonderful", "positive"),
        ("wonderful", "joy"),
        ("thank", "positive"),
        ("win", "positive"),
        ("win", "anticipation"),
    ])


@pytest.fixture
def lexicon_file(tmp_path):
    """An NRC-format lexicon file with a header and zero-flag rows."""
    path = tmp_path / "lexicon.tsv"
    path.write_text(
        "word\tsentiment\tassociation\n"
        "abandon\tfear\t1\n"
        "abandon\tjoy\t0\n"
        "abandon\tnegative\t1\n"
        "happy\tjoy\t1\n"
        "happy\tpositive\t1\n"
        "happy\tanger\t0\n"
    )
    return path


# =============================================================================
# Mock External Services
# =============================================================================


def _mock_raw_tweet(i: int, source: str = "Twitter for Android"):
    mock_tweet = MagicMock()
    mock_tweet.id = 1234567890 + i
    mock_tweet.rawContent = f"Mock tweet #{i} about the election"
    mock_tweet.user = MagicMock(username=f"user{i}", displayname=f"User {i}")
    mock_tweet.date = datetime(2016, 8, 1, 12, i, tzinfo=timezone.utc)
    mock_tweet.likeCount = 100
    mock_tweet.retweetCount = 50
    mock_tweet.replyCount = 10
    mock_tweet.viewCount = 1000
    mock_tweet.lang = "en"
    mock_tweet.hashtags = ["test"]
    mock_tweet.retweetedTweet = None
    mock_tweet.sourceLabel = source
    return mock_tweet


@pytest.fixture
def mock_twscrape_api():
    """Mock twscrape.API as imported by textlab.scraper."""
    with patch("textlab.scraper.API") as mock_api_class:
        mock_api = MagicMock()

        mock_api.pool.stats = AsyncMock(
            return_value={"active": 3, "total": 5, "locked": 2}
        )
        mock_api.pool.reset_locks = AsyncMock()

        async def mock_search(*args, **kwargs):
            for i in range(5):
                yield _mock_raw_tweet(i)

        async def mock_user_tweets(*args, **kwargs):
            for i in range(3):
                yield _mock_raw_tweet(i, source="Twitter for iPhone")

        mock_api.search = MagicMock(side_effect=mock_search)
        mock_api.user_tweets = MagicMock(side_effect=mock_user_tweets)
        mock_api.user_by_login = AsyncMock(return_value=MagicMock(id=42))

        mock_api_class.return_value = mock_api
        yield mock_api_class
