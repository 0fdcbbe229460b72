import pytest

from murmur.animation.easing import EASINGS, get_easing, linear
from murmur.animation.timeline import TimelineController, TimelineState


def run(timeline, seconds, step=1 / 60):
    elapsed = 0.0
    while elapsed < seconds:
        timeline.update(step)
        elapsed += step
    return timeline.progress


def test_trigger_from_rest_animates_to_one():
    timeline = TimelineController(duration=1.0)

    assert timeline.trigger()
    assert timeline.state is TimelineState.ANIMATING
    assert timeline.target == 1.0

    assert run(timeline, 1.1) == 1.0
    assert timeline.state is TimelineState.IDLE


def test_second_trigger_returns_to_zero():
    timeline = TimelineController(duration=0.5, progress=1.0)

    timeline.trigger()

    assert timeline.target == 0.0
    assert run(timeline, 0.6) == 0.0


def test_trigger_while_animating_is_rejected():
    timeline = TimelineController(duration=1.0)
    timeline.trigger()
    timeline.update(0.3)

    assert not timeline.trigger()
    assert timeline.target == 1.0


def test_progress_is_monotone_during_tween():
    timeline = TimelineController(duration=1.0)
    timeline.trigger()
    values = [timeline.update(0.05) for _ in range(25)]

    assert all(b >= a for a, b in zip(values, values[1:]))
    assert values[-1] == 1.0


def test_partial_replay_is_proportionally_shorter():
    timeline = TimelineController(duration=2.0, progress=0.75, ease=linear)

    timeline.trigger()

    assert timeline.target == 0.0
    timeline.update(1.0)
    assert timeline.progress == pytest.approx(0.25)
    timeline.update(0.5)
    assert timeline.progress == 0.0
    assert not timeline.is_animating


def test_direct_writes_only_while_idle():
    timeline = TimelineController(duration=1.0)

    assert timeline.set_progress(0.4)
    assert timeline.progress == 0.4

    timeline.trigger()
    assert not timeline.set_progress(0.1)


def test_direct_writes_are_clamped():
    timeline = TimelineController()

    timeline.set_progress(3.0)

    assert timeline.progress == 1.0


def test_completion_callbacks():
    landed = []
    timeline = TimelineController(duration=0.2)
    timeline.on_complete(landed.append)

    timeline.trigger()
    run(timeline, 0.3)

    assert landed == [1.0]


def test_zero_duration_lands_immediately():
    timeline = TimelineController(duration=0.0)

    assert timeline.trigger()

    assert timeline.progress == 1.0
    assert not timeline.is_animating


def test_negative_duration_is_rejected():
    with pytest.raises(ValueError):
        TimelineController(duration=-1.0)


@pytest.mark.parametrize("name", sorted(EASINGS))
def test_easings_fix_the_endpoints(name):
    ease = get_easing(name)

    assert ease(0.0) == pytest.approx(0.0)
    assert ease(1.0) == pytest.approx(1.0)


def test_unknown_easing():
    with pytest.raises(ValueError):
        get_easing("bounce")
