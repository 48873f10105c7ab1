"""Trend-adjusted projections."""

from steadfast import generate_predictions

from tests.helpers import NOW, approx, check_ins, cravings


def by_metric(model):
    return {p.metric: p for p in model.predictions}


def test_declining_mood_projection():
    events = {"checkIns": check_ins([1, 2, 3], mood=2) + check_ins([8, 9, 10], mood=4)}
    mood = by_metric(generate_predictions(events, now=NOW))["Average Mood"]
    approx(mood.current_value, 3.0)
    approx(mood.predicted_value, 2.7)
    approx(mood.confidence_interval.low, 2.2)
    approx(mood.confidence_interval.high, 3.2)
    assert mood.trend == "declining"
    assert mood.confidence == 0.7


def test_mood_projection_stays_on_scale():
    events = {"checkIns": check_ins([1, 2], mood=1)}
    mood = by_metric(generate_predictions(events, now=NOW))["Average Mood"]
    assert mood.predicted_value == 1.0
    assert mood.confidence_interval.low == 1.0
    approx(mood.confidence_interval.high, 1.5)


def test_worsening_cravings_projection():
    events = {"cravings": cravings([1, 2, 3, 4], intensity=9) + cravings([8, 9], intensity=3)}
    freq = by_metric(generate_predictions(events, now=NOW))["Craving Frequency"]
    assert freq.current_value == 6.0
    assert freq.predicted_value == 7.0
    assert freq.trend == "declining"
    assert (freq.confidence_interval.low, freq.confidence_interval.high) == (5.0, 9.0)


def test_success_rate_projection_capped():
    events = {"cravings": cravings([1, 2, 3], overcame=True) + cravings([4], overcame=False)}
    success = by_metric(generate_predictions(events, now=NOW))["Craving Success Rate"]
    approx(success.current_value, 0.75)
    approx(success.predicted_value, 0.8)
    approx(success.confidence_interval.low, 0.7)
    approx(success.confidence_interval.high, 0.9)

    perfect = by_metric(generate_predictions({}, now=NOW))["Craving Success Rate"]
    assert perfect.current_value == 1.0
    assert perfect.predicted_value == 1.0
    assert perfect.trend == "stable"


def test_intervals_are_ordered():
    for p in generate_predictions({}, now=NOW).predictions:
        assert p.confidence_interval.low <= p.confidence_interval.high


def test_accuracy_from_data_and_streak():
    assert generate_predictions({}, now=NOW).accuracy == 0.0
    model = generate_predictions({"checkIns": check_ins(range(30), mood=4)}, now=NOW)
    approx(model.accuracy, 0.65)
    assert "heuristic" in model.methodology


def test_accuracy_streak_uses_local_today():
    events = {"checkIns": [
        {"date": "2026-03-14T09:00:00-08:00", "mood": 4},
        {"date": "2026-03-15T09:00:00-08:00", "mood": 4},
    ]}
    # 2 points / 100 and a 2-day streak / 30; in UTC "today" would already be the 16th
    model = generate_predictions(events, now="2026-03-15T20:00:00-08:00")
    approx(model.accuracy, (0.02 + 2 / 30) / 2, 1e-4)
