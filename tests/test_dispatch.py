"""Background dispatcher: request ids, concurrency, errors."""

from steadfast import predict_risk
from steadfast.dispatch import AnalyticsDispatcher, DispatchError

from tests.helpers import NOW, check_ins, high_risk_events, low_risk_events


def test_concurrent_same_kind_requests_resolve_independently():
    inputs = [
        high_risk_events(),
        low_risk_events(),
        {},
        {"checkIns": check_ins(range(5), mood=2)},
        {"checkIns": check_ins(range(10), mood=5)},
    ]
    with AnalyticsDispatcher(max_workers=3) as dispatcher:
        futures = [dispatcher.predict_risk(events, now=NOW) for events in inputs]
        results = [f.result(timeout=30) for f in futures]
        assert dispatcher.pending_count == 0

    for events, result in zip(inputs, results):
        assert result == predict_risk(events, now=NOW)


def test_daily_assessment_kind():
    with AnalyticsDispatcher() as dispatcher:
        daily = dispatcher.daily_risk_assessment(high_risk_events(), now=NOW).result(timeout=30)
    assert daily.today_risk in ("high", "critical")


def test_every_kind_is_served():
    with AnalyticsDispatcher(max_workers=2) as dispatcher:
        futures = {kind: dispatcher.submit(kind, low_risk_events(), now=NOW) for kind in dispatcher.KINDS}
        for kind, future in futures.items():
            assert future.result(timeout=30) is not None, kind


def test_unknown_kind_fails_its_future():
    with AnalyticsDispatcher() as dispatcher:
        future = dispatcher.submit("train_model", {}, now=NOW)
        error = future.exception(timeout=30)
    assert isinstance(error, DispatchError)
    assert "train_model" in str(error)


def test_engine_error_is_reported():
    with AnalyticsDispatcher() as dispatcher:
        error = dispatcher.predict_risk({}, now="not a timestamp").exception(timeout=30)
    assert isinstance(error, DispatchError)
    assert "ValueError" in str(error)


def test_submit_after_shutdown_rejected():
    dispatcher = AnalyticsDispatcher()
    dispatcher.shutdown()
    try:
        dispatcher.predict_risk({})
        raise AssertionError("Should have raised DispatchError")
    except DispatchError:
        pass


def test_submit_racing_executor_shutdown_rejected():
    dispatcher = AnalyticsDispatcher()
    # Executor stops before the dispatcher marks itself closed
    dispatcher._executor.shutdown()
    try:
        dispatcher.predict_risk({})
        raise AssertionError("Should have raised DispatchError")
    except DispatchError:
        pass
    assert dispatcher.pending_count == 0
    dispatcher.shutdown()
