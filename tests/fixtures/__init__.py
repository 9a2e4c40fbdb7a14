"""
Test fixtures and sample data for textlab tests.
"""

from datetime import datetime, timezone

import pandas as pd

from textlab.scraper import ScrapedTweet

ANDROID = "Twitter for Android"
IPHONE = "Twitter for iPhone"
SOURCE_GROUPS = {ANDROID: "android", IPHONE: "iphone"}


def make_sample_tweet(
    id: int = 1234567890,
    text: str = "Crooked media is so dishonest. Sad!",
    username: str = "testuser",
    display_name: str = "Test User",
    created_at: datetime = None,
    likes: int = 100,
    retweets: int = 50,
    replies: int = 10,
    views: int = 1000,
    language: str = "en",
    is_retweet: bool = False,
    hashtags: list[str] = None,
    source: str | None = ANDROID,
) -> ScrapedTweet:
    """Create a sample ScrapedTweet for testing."""
    return ScrapedTweet(
        id=id,
        text=text,
        username=username,
        display_name=display_name,
        created_at=created_at or datetime(2016, 8, 1, 12, 0, tzinfo=timezone.utc),
        likes=likes,
        retweets=retweets,
        replies=replies,
        views=views,
        language=language,
        is_retweet=is_retweet,
        hashtags=hashtags or [],
        source=source,
    )


ANDROID_TEXTS = [
    "Crooked Hillary is a total disaster. The media is so dishonest and biased!",
    "Failing @nytimes is fake news. Sad! Weak and pathetic reporting.",
    "The system is rigged. Terrible, nasty, corrupt politicians. We will win!",
    "Dishonest media will never tell the truth. Crooked!",
]

IPHONE_TEXTS = [
    "Thank you Ohio! Join me tomorrow #MakeAmericaGreatAgain https://t.co/abc123",
    "Join us live in Florida tonight! #Trump2016 https://t.co/xyz789",
    "Thank you for the wonderful support &amp; great crowd. #MAGA",
    "Tomorrow we celebrate a great victory! #ImWithYou https://t.co/q1w2e3",
]


def make_device_tweets() -> list[ScrapedTweet]:
    """Tweets from one account posted from two clients with different voices."""
    tweets = []
    for i, text in enumerate(ANDROID_TEXTS):
        tweets.append(make_sample_tweet(
            id=100 + i,
            text=text,
            username="candidate",
            created_at=datetime(2016, 8, 1, 10 + i, 0, tzinfo=timezone.utc),
            source=ANDROID,
        ))
    for i, text in enumerate(IPHONE_TEXTS):
        tweets.append(make_sample_tweet(
            id=200 + i,
            text=text,
            username="candidate",
            created_at=datetime(2016, 8, 1, 20 + i, 0, tzinfo=timezone.utc),
            source=IPHONE,
        ))
    return tweets


def make_token_frame(group_words: dict[str, list[str]]) -> pd.DataFrame:
    """Token frame with one document per group holding the given words."""
    rows = []
    for doc_id, (group, words) in enumerate(group_words.items()):
        rows.extend((doc_id, group, word) for word in words)
    return pd.DataFrame(rows, columns=["doc_id", "group", "word"])
