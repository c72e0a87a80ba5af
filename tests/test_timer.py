from unittest.mock import patch

import pytest

from bingobj.timer import StopWatch


def test_fresh_stopwatch_reports_zero():
    watch = StopWatch()
    assert watch.elapsed_ms() == 0.0
    assert watch.average_ms() == 0.0
    assert watch.sessions == 0


def test_single_session_measures_milliseconds():
    watch = StopWatch()
    with patch("time.perf_counter", side_effect=[1.0, 1.25]):
        watch.start()
        watch.stop()
    assert watch.elapsed_ms() == pytest.approx(250.0)
    assert watch.last_ms == pytest.approx(watch.elapsed_ms())
    assert watch.sessions == 1
    assert not watch.running


def test_sessions_accumulate_and_average():
    watch = StopWatch()
    with patch("time.perf_counter", side_effect=[0.0, 1.0, 2.0, 4.0]):
        watch.start()
        watch.stop()
        first = watch.elapsed_ms()
        watch.start()
        watch.stop()
    assert watch.sessions == 2
    assert watch.elapsed_ms() == pytest.approx(first + watch.last_ms)
    assert watch.average_ms() == pytest.approx(watch.elapsed_ms() / 2)


def test_running_time_is_included_and_grows():
    watch = StopWatch()
    with patch("time.perf_counter", side_effect=[0.0, 0.1, 0.3]):
        watch.start()
        early = watch.elapsed_ms()
        later = watch.elapsed_ms()
    assert watch.running
    assert 0.0 < early < later
    assert watch.average_ms() == 0.0


def test_reset_while_stopped_clears_everything():
    watch = StopWatch()
    with patch("time.perf_counter", side_effect=[0.0, 2.0]):
        watch.start()
        watch.stop()
    watch.reset()
    assert watch.elapsed_ms() == 0.0
    assert watch.average_ms() == 0.0
    assert watch.sessions == 0
    assert watch.last_ms == 0.0


def test_reset_while_running_restarts_from_now():
    watch = StopWatch()
    with patch("time.perf_counter", side_effect=[0.0, 5.0, 5.5]):
        watch.start()
        watch.reset()
        assert watch.running
        elapsed = watch.elapsed_ms()
    assert elapsed == pytest.approx(500.0)


def test_context_manager_runs_one_session():
    with patch("time.perf_counter", side_effect=[3.0, 3.5]):
        with StopWatch() as watch:
            assert watch.running
    assert not watch.running
    assert watch.sessions == 1
    assert watch.average_ms() == pytest.approx(watch.elapsed_ms())
    assert watch.elapsed_ms() > 0.0