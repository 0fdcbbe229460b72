from dataclasses import replace

import numpy as np
import pytest

from murmur.animation import evaluator
from murmur.animation.evaluator import (
    chaos_weight,
    evaluate,
    evaluate_parallel,
    local_progress,
    random_uv,
    shape_opacity,
    shape_sprite,
    smoothstep,
)
from murmur.animation.params import STYLES, AnimationParameters
from murmur.animation.sampling import ColorTexture
from murmur.baking.baker import ParticleBaker
from murmur.baking.sampler import SurfaceSampler
from murmur.errors import BufferResolutionMismatch, InvalidLayerIndex
from tests.conftest import make_asset

STILL = AnimationParameters(oscillation_amplitude=0.0)


@pytest.fixture
def baked(two_meshes):
    return ParticleBaker(SurfaceSampler(seed=11)).bake(two_meshes, 16)


@pytest.fixture
def textures(two_meshes):
    return [ColorTexture(m.texture) for m in two_meshes]


def test_smoothstep_edges_and_midpoint():
    assert smoothstep(0.0, 1.0, -1.0) == 0.0
    assert smoothstep(0.0, 1.0, 0.5) == pytest.approx(0.5)
    assert smoothstep(0.0, 1.0, 2.0) == 1.0


def test_smoothstep_degenerate_window_is_a_step():
    x = np.array([0.2, 0.3, 0.4])
    np.testing.assert_array_equal(smoothstep(0.3, 0.3, x), [0.0, 1.0, 1.0])


@pytest.mark.parametrize("sync", [0.0, 0.25, 0.55, 1.0])
def test_local_progress_is_pinned_at_the_ends(sync):
    final_noise = np.linspace(0.0, 1.0, 11)

    np.testing.assert_array_equal(local_progress(0.0, sync, final_noise), 0.0)
    np.testing.assert_array_equal(local_progress(1.0, sync, final_noise), 1.0)


def test_local_progress_is_monotone_in_progress():
    final_noise = np.linspace(0.0, 1.0, 21)
    previous = local_progress(0.0, 0.55, final_noise)

    for p in np.linspace(0.05, 1.0, 20):
        current = local_progress(p, 0.55, final_noise)
        assert np.all(current >= previous - 1e-12)
        previous = current


def test_full_synchronization_moves_everyone_together():
    final_noise = np.array([0.0, 0.4, 0.9])

    lp = local_progress(0.3, 1.0, final_noise)

    np.testing.assert_allclose(lp, smoothstep(0.0, 1.0, 0.3))


def test_zero_synchronization_switches_each_particle_at_its_noise():
    lp = local_progress(0.5, 0.0, np.array([0.3, 0.7]))

    np.testing.assert_array_equal(lp, [1.0, 0.0])


def test_noisier_particles_start_later():
    lp = local_progress(0.4, 0.55, np.array([0.1, 0.9]))

    assert lp[0] > lp[1]


def test_chaos_weight_peaks_halfway():
    np.testing.assert_allclose(chaos_weight(np.array([0.0, 0.5, 1.0])), [0.0, 1.0, 0.0])


def test_random_uv_is_stable_and_bounded():
    indices = np.arange(1000)

    first = random_uv(indices)
    second = random_uv(indices)

    np.testing.assert_array_equal(first, second)
    assert first.shape == (1000, 2)
    assert first.min() >= 0.0 and first.max() < 10.0
    assert not np.allclose(first[:, 0], first[:, 1])


def test_shape_opacity_center_and_corner():
    hard = STYLES["hard"]
    center = shape_opacity(
        np.array([[0.5, 0.5]]), hard.shape_radius, hard.shape_hardness, hard.shape_cutoff
    )
    corner = shape_opacity(
        np.array([[0.0, 0.0]]), hard.shape_radius, hard.shape_hardness, hard.shape_cutoff
    )

    assert center[0] == 1.0
    assert corner[0] == pytest.approx(0.0, abs=1e-6)


def test_shape_opacity_stays_in_unit_range():
    coords = np.random.default_rng(0).random((500, 2))

    for preset in STYLES.values():
        alpha = shape_opacity(
            coords, preset.shape_radius, preset.shape_hardness, preset.shape_cutoff
        )
        assert alpha.min() >= 0.0 and alpha.max() <= 1.0


def test_shape_sprite_follows_style():
    glow = shape_sprite(AnimationParameters().with_style(STYLES["glow"]), size=16)
    hard = shape_sprite(AnimationParameters().with_style(STYLES["hard"]), size=16)

    assert glow.shape == hard.shape == (16, 16)
    assert glow.sum() != hard.sum()


def test_progress_zero_rests_on_mesh_a(baked, noise, textures):
    frame = evaluate(baked, STILL, noise, textures, time=3.7)

    np.testing.assert_array_equal(frame.positions, baked.layer_positions(0)[:, :3])
    np.testing.assert_array_equal(frame.local_progress, 0.0)
    np.testing.assert_allclose(
        frame.colors, textures[0].sample(baked.layer_uvs(0)), atol=1e-6
    )


def test_progress_one_rests_on_mesh_b(baked, noise, textures):
    params = replace(STILL, progress=1.0)

    frame = evaluate(baked, params, noise, textures, time=12.0)

    np.testing.assert_array_equal(frame.positions, baked.layer_positions(1)[:, :3])
    np.testing.assert_allclose(
        frame.colors, textures[1].sample(baked.layer_uvs(1)), atol=1e-6
    )


def test_sizes_scale_with_particle_size(baked, noise, textures):
    frame = evaluate(baked, STILL, noise, textures, time=0.0)

    np.testing.assert_allclose(frame.sizes, STILL.particle_size)


def test_oscillation_moves_particles_at_rest(baked, noise, textures):
    params = replace(STILL, oscillation_amplitude=0.05)

    frame = evaluate(baked, params, noise, textures, time=1.0)

    offset = np.abs(frame.positions - baked.layer_positions(0)[:, :3])
    assert offset.max() > 0.0
    assert offset.max() <= 0.05 + 1e-6


def test_chaos_only_acts_mid_transition(baked, noise, textures):
    calm = replace(STILL, progress=0.5, chaos_amplitude=0.0)
    wild = replace(STILL, progress=0.5, chaos_amplitude=1.0)

    a = evaluate(baked, calm, noise, textures, time=2.0)
    b = evaluate(baked, wild, noise, textures, time=2.0)

    assert not np.allclose(a.positions, b.positions)


def test_evaluation_is_deterministic(baked, noise, textures):
    params = replace(AnimationParameters(), progress=0.42)

    a = evaluate(baked, params, noise, textures, time=5.0)
    b = evaluate(baked, params, noise, textures, time=5.0)

    np.testing.assert_array_equal(a.positions, b.positions)
    np.testing.assert_array_equal(a.colors, b.colors)


def test_subset_matches_full_evaluation(baked, noise, textures):
    params = replace(AnimationParameters(), progress=0.6)
    subset = np.array([255, 3, 100, 0])

    full = evaluate(baked, params, noise, textures, time=1.5)
    part = evaluate(baked, params, noise, textures, time=1.5, indices=subset)

    np.testing.assert_array_equal(part.positions, full.positions[subset])
    np.testing.assert_array_equal(part.sizes, full.sizes[subset])
    np.testing.assert_array_equal(part.colors, full.colors[subset])


def test_parallel_matches_serial(baked, noise, textures):
    params = replace(AnimationParameters(), progress=0.3)

    serial = evaluate(baked, params, noise, textures, time=0.8)
    parallel = evaluate_parallel(baked, params, noise, textures, time=0.8, chunks=3)

    np.testing.assert_array_equal(parallel.indices, serial.indices)
    np.testing.assert_array_equal(parallel.positions, serial.positions)
    np.testing.assert_array_equal(parallel.colors, serial.colors)


def test_invalid_layer_is_rejected(baked, noise, textures):
    with pytest.raises(InvalidLayerIndex):
        evaluate(baked, replace(STILL, mesh_b=2), noise, textures, time=0.0)


def test_resolution_mismatch_is_rejected(baked, noise, textures):
    with pytest.raises(BufferResolutionMismatch):
        evaluate(baked, STILL, noise, textures, time=0.0, expected_resolution=32)
    with pytest.raises(BufferResolutionMismatch):
        evaluate_parallel(baked, STILL, noise, textures, 0.0, expected_resolution=64)


def test_texture_count_must_match_layers(baked, noise, textures):
    with pytest.raises(ValueError):
        evaluate(baked, STILL, noise, textures[:1], time=0.0)


def test_out_of_range_indices_are_rejected(baked, noise, textures):
    with pytest.raises(IndexError):
        evaluate(baked, STILL, noise, textures, time=0.0, indices=[baked.particle_count])


def test_parallel_builds_the_sprite_once(baked, noise, textures, monkeypatch):
    calls = []
    real = evaluator.shape_sprite

    def counting(params, size=evaluator.SPRITE_SIZE):
        calls.append(params)
        return real(params, size)

    monkeypatch.setattr(evaluator, "shape_sprite", counting)

    frame = evaluate_parallel(baked, STILL, noise, textures, 0.0, chunks=4)

    assert len(calls) == 1
    np.testing.assert_array_equal(frame.sprite, real(STILL))


def test_vertex_colors_tint_untextured_meshes(noise):
    red = make_asset(
        "red",
        [(0, 0, 0), (1, 0, 0), (0, 1, 0)],
        [(0, 1, 2)],
        asset_id=21,
    )
    red = replace(
        red,
        mesh=replace(red.mesh, colors=np.tile([1.0, 0.0, 0.0, 1.0], (3, 1))),
    )
    plain = make_asset(
        "plain", [(0, 0, 1), (1, 0, 1), (0, 1, 1)], [(0, 1, 2)], asset_id=22
    )
    baked = ParticleBaker(SurfaceSampler(seed=0)).bake([red, plain], 4)
    textures = [ColorTexture(m.texture) for m in (red, plain)]

    start = evaluate(baked, STILL, noise, textures, time=0.0)
    end = evaluate(baked, replace(STILL, progress=1.0), noise, textures, time=0.0)

    np.testing.assert_allclose(start.colors, np.tile([1.0, 0.0, 0.0, 1.0], (16, 1)))
    np.testing.assert_allclose(end.colors, 1.0)
