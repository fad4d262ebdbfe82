import pytest

from lift_kiosk.config import PollingConfig
from lift_kiosk.errors import InvalidTransition
from lift_kiosk.models import FailureCounter
from lift_kiosk.state_machine import (
    INITIAL_STATE,
    SCREENS,
    TRANSITIONS,
    KioskEvent,
    KioskState,
    PollPolicy,
    next_state,
)


def test_rotation_order():
    state = INITIAL_STATE
    visited = [state]
    for _ in range(5):
        state = next_state(state, KioskEvent.COMPLETED)
        visited.append(state)

    assert visited == [
        KioskState.UPDATE_WEATHER,
        KioskState.UPDATE_LIFT_STATUS,
        KioskState.WRITE_SCREEN_1,
        KioskState.WRITE_SCREEN_2,
        KioskState.WRITE_SCREEN_3,
        KioskState.WRITE_SCREEN_4,
    ]


@pytest.mark.parametrize(
    "event, expected",
    [
        (KioskEvent.WEATHER_DUE, KioskState.UPDATE_WEATHER),
        (KioskEvent.LIFTS_DUE, KioskState.UPDATE_LIFT_STATUS),
        (KioskEvent.ROTATION_COMPLETE, KioskState.WRITE_SCREEN_1),
    ],
)
def test_final_screen_branches(event, expected):
    assert next_state(KioskState.WRITE_SCREEN_4, event) is expected


def test_undefined_transition_is_rejected():
    with pytest.raises(InvalidTransition):
        next_state(KioskState.WRITE_SCREEN_4, KioskEvent.COMPLETED)
    with pytest.raises(InvalidTransition):
        next_state(KioskState.UPDATE_WEATHER, KioskEvent.LIFTS_DUE)


def test_every_state_is_reachable_and_screens_are_defined():
    targets = set(TRANSITIONS.values())

    assert targets == set(KioskState)
    assert set(SCREENS) == {
        KioskState.WRITE_SCREEN_1,
        KioskState.WRITE_SCREEN_2,
        KioskState.WRITE_SCREEN_3,
        KioskState.WRITE_SCREEN_4,
    }


def test_failure_counter_never_negative_and_resets():
    counter = FailureCounter()
    counter.record_success()
    assert counter.errors == 0

    for _ in range(7):
        counter.record_failure()
    assert counter.errors == 7

    counter.record_success()
    assert counter.errors == 0


@pytest.mark.parametrize("errors, expected", [(0, 0.0), (1, 5.0), (3, 15.0), (6, 30.0), (7, 30.0), (100, 30.0)])
def test_backoff_is_linear_and_capped(errors, expected):
    counter = FailureCounter()
    for _ in range(errors):
        counter.record_failure()

    assert PollPolicy().backoff(counter) == expected
    assert counter.backoff(5.0, 30.0) == expected


def test_lift_degrade_boundary():
    policy = PollPolicy(lift_degrade_threshold=6)

    assert not policy.lifts_stale(5)
    assert policy.lifts_stale(6)
    assert policy.lifts_stale(7)


def test_weather_degrade_boundary():
    policy = PollPolicy(weather_degrade_threshold=3)

    assert not policy.weather_stale(2)
    assert policy.weather_stale(3)


def test_weather_polled_sooner_without_a_report():
    policy = PollPolicy(weather_rotations=10, weather_rotations_when_empty=4)

    assert not policy.weather_due(3, has_report=False)
    assert policy.weather_due(4, has_report=False)
    assert not policy.weather_due(9, has_report=True)
    assert policy.weather_due(10, has_report=True)


@pytest.mark.parametrize(
    "rotations, has_report, expected",
    [
        (1, True, KioskEvent.ROTATION_COMPLETE),
        (2, True, KioskEvent.LIFTS_DUE),
        (3, True, KioskEvent.ROTATION_COMPLETE),
        (4, True, KioskEvent.LIFTS_DUE),
        (4, False, KioskEvent.WEATHER_DUE),
        (10, True, KioskEvent.WEATHER_DUE),
    ],
)
def test_rotation_event(rotations, has_report, expected):
    assert PollPolicy().rotation_event(rotations, has_report) is expected


def test_policy_from_config():
    policy = PollPolicy.from_config(PollingConfig(backoff_unit_seconds=1.0, max_backoff_seconds=3.0, dwell_seconds=0.5))

    assert policy.backoff_unit == 1.0
    assert policy.max_backoff == 3.0
    assert policy.dwell_seconds == 0.5
    assert policy.lift_degrade_threshold == 6
