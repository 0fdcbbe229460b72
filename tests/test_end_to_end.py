import numpy as np
import pytest

from murmur.animation.evaluator import evaluate
from murmur.animation.params import STYLES, AnimationParameters
from murmur.config import MorphSettings
from murmur.session import MorphSession

CALM = AnimationParameters(
    synchronization=1.0, chaos_amplitude=0.0, oscillation_amplitude=0.0
)


@pytest.fixture
def session(two_meshes, noise):
    s = MorphSession(
        two_meshes,
        noise,
        MorphSettings(resolution=64, duration=2.0, seed=1, animation=CALM),
    )
    yield s
    s.close()


def run(session, seconds, step=0.1):
    frame = None
    for _ in range(int(round(seconds / step))):
        frame = session.step(step)
    return frame


def test_rest_frame_shows_mesh_a(session):
    frame = session.step(0.0)

    assert len(frame) == 64 * 64
    np.testing.assert_array_equal(
        frame.positions, session.baked.layer_positions(0)[:, :3]
    )


def test_morph_lands_exactly_on_mesh_b(session):
    assert session.controls.trigger()
    assert not session.controls.trigger()

    frame = run(session, 2.5)

    assert session.store.snapshot().progress == 1.0
    assert not session.timeline.is_animating
    np.testing.assert_array_equal(
        frame.positions, session.baked.layer_positions(1)[:, :3]
    )
    assert session.mesh_name(session.store.dominant_mesh()) == "torus"


def test_morph_passes_through_the_middle(session):
    session.controls.trigger()

    frame = run(session, 1.0)

    assert 0.0 < session.store.snapshot().progress < 1.0
    assert not np.array_equal(frame.positions, session.baked.layer_positions(0)[:, :3])
    assert not np.array_equal(frame.positions, session.baked.layer_positions(1)[:, :3])


def test_replay_returns_to_mesh_a(session):
    session.controls.trigger()
    run(session, 2.5)

    assert session.controls.trigger()
    frame = run(session, 2.5)

    np.testing.assert_array_equal(
        frame.positions, session.baked.layer_positions(0)[:, :3]
    )


def test_style_is_applied_on_start(two_meshes, noise):
    session = MorphSession(
        two_meshes, noise, MorphSettings(resolution=32, style="smooth")
    )

    params = session.store.snapshot()

    assert params.shape_hardness == STYLES["smooth"].shape_hardness
    assert params.particle_size == STYLES["smooth"].particle_size
    session.close()


def test_resolution_change_rebakes(session):
    session.set_resolution(32)

    frame = session.step(0.1)

    assert session.resolution == 32
    assert session.baked.positions.shape == (2, 32, 32, 4)
    assert len(frame) == 32 * 32


def test_single_mesh_session(sphere_asset, noise):
    session = MorphSession([sphere_asset], noise, MorphSettings(resolution=32))

    session.controls.trigger()
    frame = run(session, 3.0)

    assert session.baked.layer_count == 1
    assert len(frame) == 32 * 32
    session.close()


def test_worker_pool_matches_serial(two_meshes, noise):
    settings = MorphSettings(resolution=32, seed=2)
    session = MorphSession(two_meshes, noise, settings, workers=3)
    try:
        assert session.controls.set_progress(0.4)
        params = session.store.snapshot()

        parallel = session.evaluate(params)
        serial = evaluate(
            session.baked, params, noise, session.textures, session.elapsed
        )

        np.testing.assert_array_equal(parallel.positions, serial.positions)
        np.testing.assert_array_equal(parallel.colors, serial.colors)
    finally:
        session.close()


def test_empty_mesh_list_is_rejected(noise):
    with pytest.raises(ValueError):
        MorphSession([], noise)
