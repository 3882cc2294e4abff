"""Tests for pass tokens: supersession and cancellation."""
from nodeflow.engine.session import CancellationToken, SessionManager


class TestCancellationToken:
    def test_initially_live(self):
        token = CancellationToken(1)
        assert not token.cancelled

    def test_cancel(self):
        token = CancellationToken(1)
        token.cancel()
        assert token.cancelled

    def test_cancel_is_idempotent(self):
        token = CancellationToken(1)
        token.cancel()
        token.cancel()
        assert token.cancelled


class TestSessionManager:
    def test_no_active_token_initially(self):
        sessions = SessionManager()
        assert sessions.active_token is None

    def test_serials_strictly_increase(self):
        sessions = SessionManager()
        serials = [sessions.begin().serial for _ in range(4)]
        assert serials == sorted(set(serials))

    def test_begin_activates_token(self):
        sessions = SessionManager()
        token = sessions.begin()
        assert sessions.active_token is token
        assert sessions.is_active(token)

    def test_begin_supersedes_previous(self):
        sessions = SessionManager()
        old = sessions.begin()
        new = sessions.begin()
        assert old.cancelled
        assert not sessions.is_active(old)
        assert sessions.is_active(new)

    def test_cancel_active(self):
        sessions = SessionManager()
        token = sessions.begin()
        assert sessions.cancel() is True
        assert token.cancelled
        assert sessions.active_token is None

    def test_cancel_twice(self):
        sessions = SessionManager()
        sessions.begin()
        sessions.cancel()
        assert sessions.cancel() is False

    def test_cancel_only_if_token_is_active(self):
        sessions = SessionManager()
        old = sessions.begin()
        new = sessions.begin()
        assert sessions.cancel(old) is False
        assert sessions.is_active(new)
        assert sessions.cancel(new) is True

    def test_cancelled_token_never_live_again(self):
        sessions = SessionManager()
        token = sessions.begin()
        sessions.cancel()
        sessions.begin()
        assert not sessions.is_active(token)

    def test_results_survive_new_passes(self):
        sessions = SessionManager()
        sessions.results.put("a", {"out": 1})
        sessions.begin()
        sessions.cancel()
        assert "a" in sessions.results
