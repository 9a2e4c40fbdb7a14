"""
Tweet Archive for reusing fetched timelines.

Fetching a few thousand tweets takes minutes and burns rate limit, so
fetched tweets are kept in a JSON file and merged with later downloads.
"""

import json
import logging
from datetime import datetime
from pathlib import Path

from .scraper import ScrapedTweet

logger = logging.getLogger("textlab.archive")

ARCHIVE_FILE = ".data/tweets.json"


def serialize_tweet(tweet: ScrapedTweet) -> dict:
    """Convert a ScrapedTweet to a JSON-serializable dict."""
    return {
        "id": tweet.id,
        "text": tweet.text,
        "username": tweet.username,
        "display_name": tweet.display_name,
        "created_at": tweet.created_at.isoformat() if tweet.created_at else None,
        "likes": tweet.likes,
        "retweets": tweet.retweets,
        "replies": tweet.replies,
        "views": tweet.views,
        "language": tweet.language,
        "hashtags": tweet.hashtags,
        "is_retweet": tweet.is_retweet,
        "source": tweet.source,
    }


def deserialize_tweet(data: dict) -> ScrapedTweet:
    """Convert a dict back to a ScrapedTweet."""
    return ScrapedTweet(
        id=data["id"],
        text=data["text"],
        username=data["username"],
        display_name=data.get("display_name", "Unknown"),
        created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else None,
        likes=data.get("likes", 0),
        retweets=data.get("retweets", 0),
        replies=data.get("replies", 0),
        views=data.get("views"),
        language=data.get("language"),
        hashtags=data.get("hashtags", []),
        is_retweet=data.get("is_retweet", False),
        source=data.get("source"),
    )


class TweetArchive:
    """Loads and saves fetched tweets as a JSON list."""

    def __init__(self, archive_file: str = ARCHIVE_FILE):
        self.archive_file = Path(archive_file)
        logger.info(f"TweetArchive initialized: {archive_file}")

    def exists(self) -> bool:
        return self.archive_file.exists()

    def load(self) -> list[ScrapedTweet]:
        """Load archived tweets, or an empty list if there is no usable archive."""
        if not self.archive_file.exists():
            return []

        try:
            with open(self.archive_file, encoding="utf-8") as f:
                data = json.load(f)
            tweets = [deserialize_tweet(item) for item in data.get("tweets", [])]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load archive {self.archive_file}: {e}")
            return []

        logger.info(f"Loaded {len(tweets)} tweets from archive")
        return tweets

    def save(self, tweets: list[ScrapedTweet]) -> None:
        """Overwrite the archive with the given tweets."""
        self.archive_file.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "saved_at": datetime.now().isoformat(),
            "tweets": [serialize_tweet(t) for t in tweets],
        }
        with open(self.archive_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        logger.debug(f"Archive saved: {len(tweets)} tweets")

    def merge(self, tweets: list[ScrapedTweet]) -> list[ScrapedTweet]:
        """
        Add tweets to the archive, keeping one copy per tweet id.

        Newly fetched copies replace archived ones (engagement counts move).

        Returns:
            The merged tweet list, oldest first.
        """
        by_id = {t.id: t for t in self.load()}
        added = sum(1 for t in tweets if t.id not in by_id)
        for tweet in tweets:
            by_id[tweet.id] = tweet

        merged = sorted(
            by_id.values(),
            key=lambda t: (t.created_at is None, t.created_at or datetime.min, t.id),
        )
        self.save(merged)
        logger.info(f"Archive merge: {added} new tweets, {len(merged)} total")
        return merged
