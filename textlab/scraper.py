"""
Twitter Scraper Module using twscrape.

Fetches user timelines and search results from Twitter/X for corpus
construction.

IMPORTANT: Before running, you must add Twitter accounts to twscrape.

1. Create a file called `accounts.txt` with your Twitter credentials:
   username:password:email:email_password

2. Add accounts from the file:
   twscrape add_accounts accounts.txt username:password:email:email_password

3. Login all accounts:
   twscrape login_accounts

4. Check account status:
   twscrape accounts

This populates the accounts.db SQLite database that twscrape uses for authentication.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from twscrape import API
from twscrape.models import Tweet

logger = logging.getLogger("textlab.scraper")

# twscrape already waits out rate-limit windows; this only guards against hangs
SAFETY_TIMEOUT = 1200


@dataclass
class ScrapedTweet:
    """Normalized tweet data structure."""
    id: int
    text: str
    username: str
    display_name: str
    created_at: datetime | None
    likes: int
    retweets: int
    replies: int
    views: int | None
    language: str | None
    is_retweet: bool
    hashtags: list[str] = field(default_factory=list)
    # Posting client, e.g. "Twitter for Android"
    source: str | None = None

    @classmethod
    def from_twscrape(cls, tweet: Tweet) -> "ScrapedTweet":
        """Create ScrapedTweet from twscrape Tweet object."""
        hashtags = []
        if tweet.hashtags:
            hashtags = list(tweet.hashtags)

        raw = tweet.rawContent or ""
        is_retweet = raw.startswith("RT @") or getattr(tweet, "retweetedTweet", None) is not None

        return cls(
            id=tweet.id,
            text=raw,
            username=tweet.user.username if tweet.user else "unknown",
            display_name=tweet.user.displayname if tweet.user else "Unknown",
            created_at=tweet.date,
            likes=tweet.likeCount or 0,
            retweets=tweet.retweetCount or 0,
            replies=tweet.replyCount or 0,
            views=tweet.viewCount,
            language=tweet.lang,
            is_retweet=is_retweet,
            hashtags=hashtags,
            source=getattr(tweet, "sourceLabel", None),
        )


class TwitterScraper:
    """
    Asynchronous Twitter scraper using twscrape.

    The account pool in the twscrape database handles authentication and
    waits out provider rate limits on its own; nothing here retries.
    """

    def __init__(self, db_path: str = "accounts.db"):
        """
        Initialize the Twitter scraper.

        Args:
            db_path: Path to the twscrape SQLite database containing accounts.
        """
        self.db_path = db_path
        self._api: API | None = None
        logger.info(f"TwitterScraper initialized with database: {db_path}")

    async def _get_api(self) -> API:
        """Get or create the twscrape API instance."""
        if self._api is None:
            self._api = API(self.db_path)
        return self._api

    async def fix_locks(self) -> None:
        """
        Reset account locks in the database.
        Useful when a previous run was interrupted and accounts remain locked.
        """
        try:
            api = await self._get_api()
            await api.pool.reset_locks()
            logger.info("Account locks reset successfully")
        except Exception as e:
            logger.error(f"Failed to reset account locks: {e}")

    async def get_account_stats(self) -> dict:
        """Get statistics about the account pool."""
        api = await self._get_api()
        stats = await api.pool.stats()
        logger.debug(f"Account pool stats: {stats}")
        return stats

    def _convert(self, raw_tweets: list[Tweet], label: str) -> list[ScrapedTweet]:
        tweets: list[ScrapedTweet] = []
        for tweet in raw_tweets:
            try:
                tweets.append(ScrapedTweet.from_twscrape(tweet))
            except Exception as e:
                logger.warning(f"Failed to parse tweet {getattr(tweet, 'id', '?')} for {label}: {e}")
        return tweets

    async def search_tweets(
        self,
        query: str,
        limit: int = 100,
        lang: str = "en",
    ) -> list[ScrapedTweet]:
        """
        Search for tweets matching a query.

        Args:
            query: Search query (hashtag, keyword, or phrase).
            limit: Maximum number of tweets to retrieve.
            lang: Language filter. Empty string disables the filter.

        Returns:
            List of ScrapedTweet objects; empty if the search failed.
        """
        api = await self._get_api()
        search_query = f"{query} lang:{lang}" if lang else query
        logger.info(f"Searching for: '{search_query}' (limit: {limit})")

        raw_tweets: list[Tweet] = []

        async def collect():
            async for tweet in api.search(search_query, limit=limit):
                raw_tweets.append(tweet)

        try:
            await asyncio.wait_for(collect(), timeout=SAFETY_TIMEOUT)
        except asyncio.TimeoutError:
            logger.error(f"Safety timeout reached for '{query}' after {SAFETY_TIMEOUT}s")
        except Exception as e:
            logger.error(f"Error searching for '{query}': {e}")
            return []

        tweets = self._convert(raw_tweets, f"query '{query}'")
        logger.info(f"Retrieved {len(tweets)} tweets for query: {query}")
        return tweets

    async def get_user_tweets(
        self,
        screen_name: str,
        limit: int = 3200,
    ) -> list[ScrapedTweet]:
        """
        Fetch a user's timeline.

        Args:
            screen_name: Handle without the leading @.
            limit: Maximum number of tweets to retrieve.

        Returns:
            List of ScrapedTweet objects; empty if the user was not found
            or the request failed.
        """
        api = await self._get_api()
        screen_name = screen_name.lstrip("@")
        logger.info(f"Fetching timeline for @{screen_name} (limit: {limit})")

        try:
            user = await api.user_by_login(screen_name)
        except Exception as e:
            logger.error(f"Failed to look up @{screen_name}: {e}")
            return []
        if user is None:
            logger.warning(f"User @{screen_name} not found")
            return []

        raw_tweets: list[Tweet] = []

        async def collect():
            async for tweet in api.user_tweets(user.id, limit=limit):
                raw_tweets.append(tweet)

        try:
            await asyncio.wait_for(collect(), timeout=SAFETY_TIMEOUT)
        except asyncio.TimeoutError:
            logger.error(f"Safety timeout reached for @{screen_name} after {SAFETY_TIMEOUT}s")
        except Exception as e:
            logger.error(f"Error fetching timeline for @{screen_name}: {e}")
            return []

        tweets = self._convert(raw_tweets, f"@{screen_name}")
        logger.info(f"Retrieved {len(tweets)} tweets from @{screen_name}")
        return tweets

    async def get_timelines(
        self,
        screen_names: list[str],
        limit_per_user: int = 3200,
    ) -> dict[str, list[ScrapedTweet]]:
        """
        Fetch several timelines one after another.

        Args:
            screen_names: Handles to fetch.
            limit_per_user: Number of tweets per handle.

        Returns:
            Dictionary mapping each handle to its tweets.
        """
        logger.info(f"Fetching {len(screen_names)} timelines")
        timelines: dict[str, list[ScrapedTweet]] = {}

        for screen_name in screen_names:
            try:
                timelines[screen_name] = await self.get_user_tweets(screen_name, limit=limit_per_user)
            except Exception as e:
                logger.error(f"Failed to fetch timeline for '{screen_name}': {e}")
                timelines[screen_name] = []

        total = sum(len(t) for t in timelines.values())
        logger.info(f"Timeline fetch complete: {total} total tweets")
        return timelines
