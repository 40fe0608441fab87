"""Tests for the convergence polling helper."""

import pytest
from unittest.mock import Mock

from fsck.exceptions import ConvergenceTimeoutError
from fsck.retry import wait_until


def test_returns_first_accepted_result():
    action = Mock(side_effect=[1, 2, 3])
    sleep = Mock()

    assert wait_until(action, lambda value: value >= 2, interval=0.5, sleep=sleep) == 2
    assert action.call_count == 2
    sleep.assert_called_once_with(0.5)


def test_no_sleep_when_first_attempt_succeeds():
    sleep = Mock()

    assert wait_until(lambda: 'ok', lambda value: True, sleep=sleep) == 'ok'
    sleep.assert_not_called()


def test_backoff_grows_and_is_capped():
    delays = []
    action = Mock(side_effect=[False, False, False, False, True])

    wait_until(action, bool, interval=1.0, backoff=2.0, max_interval=3.0, sleep=delays.append)

    assert delays == [1.0, 2.0, 3.0, 3.0]


def test_gives_up_after_max_attempts():
    action = Mock(return_value=False)

    with pytest.raises(ConvergenceTimeoutError):
        wait_until(action, bool, interval=0, max_attempts=3, sleep=lambda s: None)
    assert action.call_count == 3


@pytest.mark.parametrize('kwargs', [
    {'interval': -1},
    {'backoff': 0.5},
    {'max_attempts': 0},
])
def test_rejects_bad_arguments(kwargs):
    with pytest.raises(ValueError):
        wait_until(lambda: True, bool, **kwargs)
