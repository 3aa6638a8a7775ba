"""Tests for the flocking model."""

import numpy as np
import pytest

from hyperscope.core import vector
from hyperscope.core.flocking import FlockingModel
from hyperscope.core.physics import SimulationState


@pytest.fixture
def model():
    return FlockingModel(width=400, height=300)


class TestClampInvariant:
    @pytest.mark.parametrize("spread", [5.0, 40.0, 200.0])
    def test_behaviours_never_exceed_max_force(self, model, rng, spread):
        positions = rng.uniform(0, spread, (80, 2))
        velocities = rng.uniform(-5, 5, (80, 2))
        for behaviour in (model.separation, model.alignment, model.cohesion):
            steer = behaviour(positions, velocities)
            assert np.all(vector.magnitudes(steer) <= model.max_force + 1e-12)

    def test_coincident_fish(self, model):
        positions = np.full((5, 2), 100.0)
        velocities = np.zeros((5, 2))
        steer = model.separation(positions, velocities)
        assert np.all(np.isfinite(steer))


class TestBehaviours:
    def test_lonely_fish_gets_no_steering(self, model):
        positions = np.array([[0.0, 0.0], [300.0, 250.0]])
        velocities = np.array([[1.0, 0.0], [0.0, 1.0]])
        for behaviour in (model.separation, model.alignment, model.cohesion):
            np.testing.assert_array_equal(behaviour(positions, velocities), np.zeros((2, 2)))

    def test_separation_pushes_apart(self, model):
        positions = np.array([[100.0, 100.0], [110.0, 100.0]])
        steer = model.separation(positions, np.zeros((2, 2)))
        assert steer[0, 0] < 0
        assert steer[1, 0] > 0

    def test_cohesion_pulls_together(self, model):
        positions = np.array([[100.0, 100.0], [160.0, 100.0]])
        steer = model.cohesion(positions, np.zeros((2, 2)))
        assert steer[0, 0] > 0
        assert steer[1, 0] < 0

    def test_alignment_matches_heading(self, model):
        positions = np.array([[100.0, 100.0], [130.0, 100.0]])
        velocities = np.array([[0.0, 0.0], [0.0, 2.0]])
        steer = model.alignment(positions, velocities)
        assert steer[0, 1] > 0


class TestScatter:
    def test_no_scatter_without_amplitude(self, model):
        positions = np.array([[10.0, 10.0]])
        np.testing.assert_array_equal(model.scatter(positions, None), np.zeros((1, 2)))

    def test_no_scatter_at_threshold(self, model):
        positions = np.array([[10.0, 10.0]])
        np.testing.assert_array_equal(model.scatter(positions, 100.0), np.zeros((1, 2)))

    def test_scatter_pushes_from_centre(self, model):
        positions = np.array([[300.0, 150.0], [100.0, 150.0]])
        push = model.scatter(positions, 180.0)
        np.testing.assert_allclose(push, [[0.2, 0.0], [-0.2, 0.0]])


class TestApply:
    def test_speed_clamped_per_axis(self, model, rng):
        state = SimulationState.create(rng.uniform(0, 300, (40, 2)), rng.uniform(-10, 10, (40, 2)))
        model.apply(state, amplitude=255.0)
        assert np.all(np.abs(state.velocities) <= model.max_speed)

    def test_positions_wrap(self, model):
        state = SimulationState.create(np.array([[399.5, 1.0]]), np.array([[2.0, -2.0]]))
        model.apply(state)
        np.testing.assert_allclose(state.positions[0], [1.5, 299.0])

    def test_entity_views_survive(self, model, rng):
        state = SimulationState.create(rng.uniform(0, 300, (10, 2)), np.zeros((10, 2)))
        model.apply(state)
        np.testing.assert_array_equal(state.entities[3].position, state.positions[3])

    def test_rejects_higher_dimensions(self, model):
        state = SimulationState.create(np.zeros((3, 5)), np.zeros((3, 5)))
        with pytest.raises(ValueError):
            model.apply(state)

    def test_snapshot_update_is_order_independent(self, model, rng):
        positions = rng.uniform(0, 300, (25, 2))
        velocities = rng.uniform(-2, 2, (25, 2))
        perm = rng.permutation(25)

        a = SimulationState.create(positions, velocities)
        b = SimulationState.create(positions[perm], velocities[perm])
        model.apply(a, 50.0)
        model.apply(b, 50.0)
        np.testing.assert_allclose(a.positions[perm], b.positions, atol=1e-9)
