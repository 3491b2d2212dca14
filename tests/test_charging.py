from datetime import timedelta

import pytest

from custom_components.nordpool_ev.domain.charging import (
    ChargingWindow,
    InsufficientData,
    best_future_window,
    best_window,
    current_price,
    ongoing_window,
    price_stats,
    recommend,
    window_ticks,
)
from custom_components.nordpool_ev.domain.resample import Resolution
from helpers import make_series, utc

HELSINKI = "Europe/Helsinki"


def test_best_window_finds_cheapest_run() -> None:
    series = make_series(utc(2024, 6, 1), [10.0, 1.0, 1.0, 1.0, 10.0, 10.0])

    window = best_window(series, 3)

    assert window == ChargingWindow(start_index=1, end_index=3, average_price=1.0)
    assert window.length == 3


def test_best_window_prefers_earliest_on_ties() -> None:
    series = make_series(utc(2024, 6, 1), [1.0, 1.0, 5.0, 1.0, 1.0])

    assert best_window(series, 2).start_index == 0


def test_best_window_whole_series() -> None:
    series = make_series(utc(2024, 6, 1), [3.0, -1.0, 4.0])

    assert best_window(series, 3) == ChargingWindow(0, 2, 2.0)


def test_best_window_needs_enough_prices() -> None:
    series = make_series(utc(2024, 6, 1), [1.0, 2.0])

    with pytest.raises(InsufficientData):
        best_window(series, 3)
    with pytest.raises(InsufficientData):
        best_window([], 1)
    with pytest.raises(ValueError):
        best_window(series, 0)


def test_window_ticks() -> None:
    assert window_ticks(4, Resolution.HOURLY) == 4
    assert window_ticks(4, Resolution.FIFTEEN_MINUTE) == 16


def test_best_future_window_indexes_full_series() -> None:
    # The cheapest run lies in the past and must be ignored
    series = make_series(utc(2024, 6, 1), [0.0, 0.0, 9.0, 5.0, 3.0, 3.0, 8.0])

    window = best_future_window(series, utc(2024, 6, 1, 2), 2)

    assert window == ChargingWindow(4, 5, 3.0)
    assert series[window.start_index].timestamp == utc(2024, 6, 1, 4)


def test_best_future_window_without_future() -> None:
    series = make_series(utc(2024, 6, 1), [1.0, 2.0])

    with pytest.raises(InsufficientData):
        best_future_window(series, utc(2024, 6, 2), 1)


def test_recommendation_ahead_of_window() -> None:
    series = make_series(utc(2024, 6, 1), [10.0, 8.0, 2.0, 2.0, 6.0, 12.0])
    now = utc(2024, 6, 1, 0, 30)
    window = best_future_window(series, now, 2)

    result = recommend(series, window, now, HELSINKI, Resolution.HOURLY)

    assert window == ChargingWindow(2, 3, 2.0)
    assert result.start == utc(2024, 6, 1, 2)
    assert result.end == utc(2024, 6, 1, 4)
    assert not result.is_active
    assert result.average_price == pytest.approx(6.0)
    assert result.savings_percent == pytest.approx(200 / 3)
    assert result.charge_cost == pytest.approx(1.5)
    assert result.charging_hours == pytest.approx(75 / 11)
    assert result.day == "today"


def _planned(series, now, length=2):
    window = best_future_window(series, now, length)
    return recommend(series, window, now, HELSINKI, Resolution.HOURLY)


@pytest.mark.parametrize(
    "elapsed", [timedelta(milliseconds=1), timedelta(minutes=30), timedelta(hours=1)]
)
def test_started_window_stays_active(elapsed) -> None:
    series = make_series(utc(2024, 6, 1), [10.0, 8.0, 2.0, 2.0, 6.0, 12.0])
    planned = _planned(series, utc(2024, 6, 1, 0, 30))
    now = planned.start + elapsed

    window = ongoing_window(series, planned, now, Resolution.HOURLY)
    assert window == planned.window

    result = recommend(
        series,
        window,
        now,
        HELSINKI,
        Resolution.HOURLY,
        charger_power_kw=7.5,
        battery_size_kwh=60.0,
    )

    assert result.is_active
    assert result.start == utc(2024, 6, 1, 2)
    assert result.end == utc(2024, 6, 1, 4)
    assert result.charge_cost == pytest.approx(1.2)
    assert result.charging_hours == pytest.approx(8.0)


def test_fresh_search_after_start_skips_running_window() -> None:
    series = make_series(utc(2024, 6, 1), [10.0, 8.0, 1.0, 1.0, 6.0, 12.0, 12.0])
    now = utc(2024, 6, 1, 2, 0, 0, 3000)

    assert best_future_window(series, now, 2).start_index == 3


def test_window_is_released_at_its_end() -> None:
    series = make_series(utc(2024, 6, 1), [10.0, 8.0, 2.0, 2.0, 6.0, 12.0])
    planned = _planned(series, utc(2024, 6, 1, 0, 30))

    assert ongoing_window(series, planned, planned.end, Resolution.HOURLY) is None
    early = utc(2024, 6, 1, 1)
    assert ongoing_window(series, planned, early, Resolution.HOURLY) is None
    assert ongoing_window(series, None, planned.start, Resolution.HOURLY) is None


def test_held_window_missing_from_series() -> None:
    series = make_series(utc(2024, 6, 1), [10.0, 8.0, 2.0, 2.0, 6.0, 12.0])
    planned = _planned(series, utc(2024, 6, 1, 0, 30))
    now = planned.start + timedelta(minutes=5)

    shifted = make_series(utc(2024, 6, 2), [1.0] * 6)
    quarter = Resolution.FIFTEEN_MINUTE.tick
    quarters = make_series(utc(2024, 6, 1), [1.0] * 24, quarter)

    assert ongoing_window(shifted, planned, now, Resolution.HOURLY) is None
    assert ongoing_window(series[:3], planned, now, Resolution.HOURLY) is None
    assert ongoing_window(quarters, planned, now, Resolution.FIFTEEN_MINUTE) is None


def test_last_tick_of_window_without_future() -> None:
    series = make_series(utc(2024, 6, 1), [9.0, 1.0, 1.0])
    planned = _planned(series, utc(2024, 6, 1, 0, 30))
    now = utc(2024, 6, 1, 2, 30)

    window = ongoing_window(series, planned, now, Resolution.HOURLY)
    result = recommend(series, window, now, HELSINKI, Resolution.HOURLY)

    assert result.is_active
    assert result.average_price == 1.0
    assert result.savings_percent == 0.0


def test_recommendation_ends_one_tick_after_last_point() -> None:
    quarter = Resolution.FIFTEEN_MINUTE.tick
    series = make_series(utc(2024, 6, 1), [5.0] * 8, step=quarter)
    now = utc(2024, 6, 1)

    result = recommend(
        series, ChargingWindow(0, 3, 5.0), now, HELSINKI, Resolution.FIFTEEN_MINUTE
    )

    assert result.end == utc(2024, 6, 1, 1)
    assert result.savings_percent == 0.0


def test_recommendation_for_tomorrow() -> None:
    # 23:00 local time, the cheap hours start after midnight
    series = make_series(utc(2024, 6, 1, 20), [9.0, 1.0, 1.0, 9.0, 9.0, 9.0])
    now = utc(2024, 6, 1, 20)
    window = best_future_window(series, now, 2)

    result = recommend(series, window, now, HELSINKI, Resolution.HOURLY)

    assert result.start == utc(2024, 6, 1, 21)
    assert result.day == "tomorrow"


def test_recommendation_beyond_tomorrow_has_no_day() -> None:
    series = make_series(utc(2024, 6, 3), [1.0, 1.0])
    now = utc(2024, 6, 1, 6)

    result = recommend(
        series, ChargingWindow(0, 1, 1.0), now, HELSINKI, Resolution.HOURLY
    )

    assert result.day is None


def test_price_stats() -> None:
    series = make_series(utc(2024, 6, 1), [4.0, -2.0, 10.0, 0.0])

    stats = price_stats(series)

    assert stats is not None
    assert stats.min_price == -2.0
    assert stats.min_at == utc(2024, 6, 1, 1)
    assert stats.max_price == 10.0
    assert stats.max_at == utc(2024, 6, 1, 2)
    assert stats.average_price == pytest.approx(3.0)
    assert price_stats([]) is None


def test_current_price() -> None:
    series = make_series(utc(2024, 6, 1), [0.0, 4.0, 5.0])

    current = current_price(series, utc(2024, 6, 1, 2, 10))
    assert current is not None
    assert current.point.price == 5.0
    assert current.previous == series[1]
    assert current.change_percent == pytest.approx(25.0)

    after_zero = current_price(series, utc(2024, 6, 1, 1))
    assert after_zero is not None
    assert after_zero.change_percent == 0.0

    first = current_price(series, utc(2024, 6, 1))
    assert first is not None
    assert first.previous is None

    assert current_price(series, utc(2024, 5, 31, 23)) is None
