from unittest.mock import patch

import pytest

from app.domain.errors import ConcurrencyConflict, InvalidQuantity
from app.utils.retry import conflict_retry
from app.utils.settings import CART_CONFLICT_RETRIES


class TestConflictRetry:
    def test_default_attempts_come_from_settings(self):
        calls = []

        @conflict_retry()
        def always_conflicts():
            calls.append(1)
            raise ConcurrencyConflict(1)

        with patch("time.sleep"):
            with pytest.raises(ConcurrencyConflict):
                always_conflicts()

        assert len(calls) == CART_CONFLICT_RETRIES

    def test_backoff_outlasts_a_short_competing_commit(self):
        calls = []

        @conflict_retry(attempts=5)
        def always_conflicts():
            calls.append(1)
            raise ConcurrencyConflict(1)

        with patch("time.sleep") as sleep:
            with pytest.raises(ConcurrencyConflict):
                always_conflicts()

        waits = [c.args[0] for c in sleep.call_args_list]
        assert len(calls) == 5
        assert len(waits) == 4
        assert waits == sorted(waits)
        assert waits[0] == pytest.approx(0.05)
        assert sum(waits) >= 0.7

    def test_succeeds_once_conflict_clears(self):
        outcomes = [ConcurrencyConflict(1), ConcurrencyConflict(1), "ok"]

        @conflict_retry(attempts=3)
        def flaky():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        with patch("time.sleep"):
            assert flaky() == "ok"

    def test_other_errors_not_retried(self):
        calls = []

        @conflict_retry()
        def invalid():
            calls.append(1)
            raise InvalidQuantity(0)

        with patch("time.sleep") as sleep:
            with pytest.raises(InvalidQuantity):
                invalid()

        assert len(calls) == 1
        sleep.assert_not_called()
