"""Tests for branchout.publishers.twitter_publisher.TwitterPublisher.

The tweepy client is mocked; nothing is posted.
"""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, call

import pytest
from tenacity import wait_none

from branchout.publishers.twitter_publisher import TwitterPublisher


def _response(tweet_id: int) -> SimpleNamespace:
    return SimpleNamespace(data={"id": tweet_id})


class TestPostThread:
    def test_posts_reply_chain(self):
        client = MagicMock()
        client.create_tweet.side_effect = [_response(1), _response(2), _response(3)]

        ids = TwitterPublisher(client).post_thread(["One (1/3)", "Two (2/3)", "Three (3/3)"])

        assert ids == ["1", "2", "3"]
        assert client.create_tweet.call_args_list == [
            call(text="One (1/3)"),
            call(text="Two (2/3)", in_reply_to_tweet_id="1"),
            call(text="Three (3/3)", in_reply_to_tweet_id="2"),
        ]

    def test_blank_posts_are_skipped(self):
        client = MagicMock()
        client.create_tweet.return_value = _response(7)

        ids = TwitterPublisher(client).post_thread(["  ", "Only post"])

        assert ids == ["7"]
        client.create_tweet.assert_called_once_with(text="Only post")

    def test_retries_after_failure(self, monkeypatch):
        monkeypatch.setattr(TwitterPublisher._create_tweet.retry, "wait", wait_none())
        client = MagicMock()
        client.create_tweet.side_effect = [RuntimeError("503"), _response(9)]

        ids = TwitterPublisher(client).post_thread(["Single post"])

        assert ids == ["9"]
        assert client.create_tweet.call_count == 2

    def test_failure_midway_resumes_without_reposting(self, monkeypatch):
        monkeypatch.setattr(TwitterPublisher._create_tweet.retry, "wait", wait_none())
        client = MagicMock()
        client.create_tweet.side_effect = [_response(1), RuntimeError("503"), _response(2)]

        ids = TwitterPublisher(client).post_thread(["one (1/2)", "two (2/2)"])

        assert ids == ["1", "2"]
        assert client.create_tweet.call_args_list == [
            call(text="one (1/2)"),
            call(text="two (2/2)", in_reply_to_tweet_id="1"),
            call(text="two (2/2)", in_reply_to_tweet_id="1"),
        ]

    def test_gives_up_after_three_attempts(self, monkeypatch):
        monkeypatch.setattr(TwitterPublisher._create_tweet.retry, "wait", wait_none())
        client = MagicMock()
        client.create_tweet.side_effect = RuntimeError("503")

        with pytest.raises(RuntimeError):
            TwitterPublisher(client).post_thread(["Single post"])
        assert client.create_tweet.call_count == 3
