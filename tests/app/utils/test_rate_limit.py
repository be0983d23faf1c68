"""Tests for the send rate limiter."""

import logging

import redis

from app.utils.rate_limit import check_send_rate_limit


class FakePipeline:
    def __init__(self, store):
        self.store = store
        self.ops = []

    def incr(self, key):
        self.ops.append(key)

    def expire(self, key, seconds):
        pass

    def execute(self):
        results = []
        for key in self.ops:
            self.store[key] = self.store.get(key, 0) + 1
            results.append(self.store[key])
        return results + [True]


class FakeRedis:
    def __init__(self):
        self.store = {}

    def pipeline(self):
        return FakePipeline(self.store)


class BrokenRedis:
    def pipeline(self):
        raise redis.ConnectionError("connection refused")


def test_no_client_or_limit_always_allows(user_id):
    assert check_send_rate_limit("mood", str(user_id), None, 1)
    assert check_send_rate_limit("mood", str(user_id), FakeRedis(), None)


def test_limit_applies_per_scope_and_user(user_id, other_user_id):
    client = FakeRedis()
    assert check_send_rate_limit("mood", str(user_id), client, 2)
    assert check_send_rate_limit("mood", str(user_id), client, 2)
    assert not check_send_rate_limit("mood", str(user_id), client, 2)
    assert check_send_rate_limit("direct", str(user_id), client, 2)
    assert check_send_rate_limit("mood", str(other_user_id), client, 2)


def test_redis_failure_fails_open(user_id):
    assert check_send_rate_limit("mood", str(user_id), BrokenRedis(), 1)


def test_redis_failure_is_logged_under_app_namespace(user_id, caplog):
    with caplog.at_level(logging.WARNING, logger="moodlink"):
        check_send_rate_limit("mood", str(user_id), BrokenRedis(), 1)
    assert [r.name for r in caplog.records] == ["moodlink.rate_limit"]
