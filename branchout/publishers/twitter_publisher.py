from __future__ import annotations

import logging

import tweepy
from tenacity import retry, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)


class TwitterPublisher:
    def __init__(self, client: tweepy.Client) -> None:
        self._client = client

    def post_thread(self, posts: list[str]) -> list[str]:
        """Post *posts* as a reply chain and return the tweet ids in order.

        Each tweet is retried on its own, so a failure partway through
        never re-posts the tweets already in the chain.
        """
        tweet_ids: list[str] = []
        parent_id: str | None = None

        for post in posts:
            text = post.strip()
            if not text:
                continue

            tweet_id = self._create_tweet(text, parent_id)
            tweet_ids.append(tweet_id)
            parent_id = tweet_id
            logger.info("Posted tweet %s: %s", tweet_id, text[:50])

        return tweet_ids

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        reraise=True,
    )
    def _create_tweet(self, text: str, parent_id: str | None) -> str:
        if parent_id is not None:
            response = self._client.create_tweet(
                text=text, in_reply_to_tweet_id=parent_id
            )
        else:
            response = self._client.create_tweet(text=text)
        return str(response.data["id"])
