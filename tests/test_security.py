"""
Tests for utils/security.py and utils/logger.py.
"""
import logging

import pytest

from utils.logger import RequestContextFilter
from utils.security import AttemptTracker, password_meets_policy


# ── Password policy ───────────────────────────────────────────────────────────

class TestPasswordPolicy:
    def test_strong_password(self):
        assert password_meets_policy("Str0ng!Passw0rd") == (True, None)

    @pytest.mark.parametrize(
        "password,reason",
        [
            ("Sh0rt!", "at least 12 characters"),
            ("alllowercase1!x", "upper and lower case"),
            ("NoDigitsHere!!", "digit"),
            ("NoSymbols12345", "symbol"),
            (None, "at least 12 characters"),
        ],
    )
    def test_first_failing_rule_reported(self, password, reason):
        ok, message = password_meets_policy(password)
        assert not ok
        assert reason in message


# ── Login throttle ────────────────────────────────────────────────────────────

class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestAttemptTracker:
    def test_limit_within_window(self):
        tracker = AttemptTracker(clock=FakeClock())
        assert [tracker.hit("login:10.0.0.1", limit=2, window=60) for _ in range(3)] == [True, True, False]

    def test_keys_are_independent(self):
        tracker = AttemptTracker(clock=FakeClock())
        tracker.hit("login:10.0.0.1", limit=1, window=60)
        assert tracker.hit("login:10.0.0.2", limit=1, window=60)

    def test_old_attempts_expire(self):
        clock = FakeClock()
        tracker = AttemptTracker(clock=clock)
        tracker.hit("login:10.0.0.1", limit=1, window=60)
        assert not tracker.hit("login:10.0.0.1", limit=1, window=60)

        clock.now += 61
        assert tracker.hit("login:10.0.0.1", limit=1, window=60)

    def test_reset(self):
        tracker = AttemptTracker(clock=FakeClock())
        tracker.hit("login:10.0.0.1", limit=1, window=60)
        tracker.reset("login:10.0.0.1")
        assert tracker.hit("login:10.0.0.1", limit=1, window=60)


# ── Log records ───────────────────────────────────────────────────────────────

def _record():
    return logging.LogRecord("work_tracker", logging.INFO, __file__, 1, "msg", None, None)


class TestRequestContextFilter:
    def test_outside_request(self, ctx):
        record = _record()
        assert RequestContextFilter().filter(record)
        assert (record.client_ip, record.http_method, record.http_path) == ("-", "-", "-")

    def test_inside_request(self, app):
        with app.test_request_context("/work-records", method="POST", environ_base={"REMOTE_ADDR": "10.1.2.3"}):
            record = _record()
            RequestContextFilter().filter(record)
        assert (record.client_ip, record.http_method, record.http_path) == ("10.1.2.3", "POST", "/work-records")

    def test_log_file_written(self, app, tmp_path):
        app.logger.warning("Dashboard stats refreshed")
        for handler in app.logger.handlers:
            handler.flush()
        content = (tmp_path / "logs" / "work_tracker.log").read_text(encoding="utf-8")
        assert "Dashboard stats refreshed" in content
        assert "| - - - |" in content
