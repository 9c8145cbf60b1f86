from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from flocking.sim.core.boid import Boid
from flocking.sim.core.config import BoidTypeConfig, Shape, SimulationConfig
from flocking.sim.core.rng import DeterministicRng
from flocking.sim.systems import steering


def _quiet_config(**overrides) -> BoidTypeConfig:
    values = dict(
        name="Test",
        flock_size=0,
        min_speed=0.0,
        max_speed=1000.0,
        turn_factor=0.0,
        perception_radius=100.0,
        separation_radius=20.0,
        separation_weight=0.0,
        alignment_weight=0.0,
        cohesion_weight=0.0,
        anchor_radius=50.0,
        anchored_cohesion_weight=0.0,
    )
    values.update(overrides)
    return BoidTypeConfig(**values)


def _world() -> SimulationConfig:
    return SimulationConfig(canvas_width=1000.0, canvas_height=1000.0, flocks=[])


def _boid(config: BoidTypeConfig, x: float, y: float, vx: float = 0.0, vy: float = 0.0) -> Boid:
    return Boid(position=Vector2(x, y), config=config, velocity=Vector2(vx, vy))


def test_separation_decreases_with_distance_and_vanishes_at_radius():
    config = _quiet_config(separation_weight=1.0, separation_radius=20.0)
    boid = _boid(config, 500, 500)
    magnitudes = []
    for gap in (2.0, 5.0, 10.0, 15.0, 19.0):
        other = _boid(config, 500 + gap, 500)
        force, _ = steering.separation_force(boid, [boid, other])
        magnitudes.append(force.length())
        assert force.x < 0
    assert magnitudes == sorted(magnitudes, reverse=True)
    assert magnitudes[0] == approx(18.0)

    for gap in (20.0, 35.0):
        other = _boid(config, 500 + gap, 500)
        force, _ = steering.separation_force(boid, [boid, other])
        assert force.length() == 0.0


def test_separation_sums_neighbors_and_applies_weight():
    config = _quiet_config(separation_weight=0.5, separation_radius=20.0)
    boid = _boid(config, 500, 500)
    left = _boid(config, 490, 500)
    below = _boid(config, 500, 510)
    force, checks = steering.separation_force(boid, [left, boid, below])
    assert checks == 2
    assert force.x == approx(5.0)
    assert force.y == approx(-5.0)


def test_separation_skips_coincident_boids():
    config = _quiet_config(separation_weight=1.0)
    boid = _boid(config, 500, 500)
    twin = _boid(config, 500, 500)
    force, _ = steering.separation_force(boid, [boid, twin])
    assert force == Vector2(0, 0)


def test_lone_boid_has_no_flock_force():
    config = _quiet_config(alignment_weight=2.0, cohesion_weight=2.0, perception_radius=30.0)
    boid = _boid(config, 500, 500, 3, 0)
    far = _boid(config, 600, 600, -3, 0)
    force, checks = steering.flock_force(boid, [boid, far], active=False, anchor=None)
    assert force == Vector2(0, 0)
    assert checks == 1


def test_alignment_and_cohesion_average_neighbors():
    config = _quiet_config(alignment_weight=1.0, cohesion_weight=0.5)
    boid = _boid(config, 500, 500, 2, 0)
    a = _boid(config, 510, 500, 0, 4)
    b = _boid(config, 530, 500, 0, 0)
    force, _ = steering.flock_force(boid, [boid, a, b], active=False, anchor=None)
    # alignment (0, 2) - (2, 0); cohesion (520, 500) - (500, 500) at half weight
    assert force.x == approx(-2.0 + 10.0)
    assert force.y == approx(2.0)


def test_anchored_flock_suppresses_alignment():
    config = _quiet_config(alignment_weight=1.0, cohesion_weight=1.0, anchored_cohesion_weight=2.0)
    boid = _boid(config, 500, 500, 5, 0)
    other = _boid(config, 510, 500, 0, 5)
    anchor = Vector2(100, 100)

    anchored, _ = steering.flock_force(boid, [boid, other], active=True, anchor=anchor)
    assert anchored.x == approx(20.0)
    assert anchored.y == approx(0.0)

    inactive, _ = steering.flock_force(boid, [boid, other], active=False, anchor=anchor)
    assert inactive.x == approx(-5.0 + 10.0)
    assert inactive.y == approx(5.0)


def test_edge_force_pushes_inward_with_unit_direction():
    config = _quiet_config(turn_factor=2.0)
    world = _world()

    corner = _boid(config, 10, 10)
    force = steering.edge_force(corner, world)
    assert force.length() == approx(2.0)
    assert force.x > 0 and force.y > 0
    assert force.x == approx(force.y)

    right = _boid(config, 990, 500)
    force = steering.edge_force(right, world)
    assert force.x == approx(-2.0)
    assert force.y == 0.0

    middle = _boid(config, 500, 500)
    assert steering.edge_force(middle, world) == Vector2(0, 0)


def test_seek_is_zero_inside_anchor_radius():
    config = _quiet_config(anchor_radius=50.0)
    boid = _boid(config, 500, 500)
    assert steering.seek_force(boid, Vector2(520, 500)) == Vector2(0, 0)
    pull = steering.seek_force(boid, Vector2(500, 800))
    assert pull.x == approx(0.0)
    assert pull.y == approx(300.0)


def test_anchor_attracts_only_the_active_flock():
    config = _quiet_config(anchor_radius=10.0)
    world = _world()
    boid = _boid(config, 500, 500)
    anchor = Vector2(100, 100)

    velocity, _ = boid.compute_velocity([boid], [boid], True, anchor, world)
    to_anchor = anchor - boid.position
    assert velocity.dot(to_anchor) > 0

    idle, _ = boid.compute_velocity([boid], [boid], False, anchor, world)
    assert idle == Vector2(0, 0)


def test_compute_velocity_does_not_mutate():
    config = _quiet_config(separation_weight=1.0)
    boid = _boid(config, 500, 500, 1, 1)
    other = _boid(config, 505, 500)
    velocity, _ = boid.compute_velocity([boid, other], [boid, other], False, None, _world())
    assert boid.velocity == Vector2(1, 1)
    assert velocity != Vector2(1, 1)


def test_speed_clamp_applies_min_then_max():
    world = _world()
    slow = _boid(_quiet_config(min_speed=4.0, max_speed=8.0), 500, 500, 1, 0)
    slow.update_forces([slow], [slow], False, None, world)
    assert slow.velocity.length() == approx(4.0)

    fast = _boid(_quiet_config(min_speed=4.0, max_speed=8.0), 500, 500, 0, 30)
    fast.update_forces([fast], [fast], False, None, world)
    assert fast.velocity.length() == approx(8.0)

    inverted = _boid(_quiet_config(min_speed=10.0, max_speed=5.0), 500, 500, 1, 0)
    inverted.update_forces([inverted], [inverted], False, None, world)
    assert inverted.velocity.length() == approx(5.0)


def test_resting_boid_is_not_lifted_to_min_speed():
    world = _world()
    boid = _boid(_quiet_config(min_speed=4.0), 500, 500)
    boid.update_forces([boid], [boid], False, None, world)
    assert boid.velocity == Vector2(0, 0)


def test_update_position_integrates_velocity():
    boid = _boid(_quiet_config(), 10, 20, 30, -40)
    boid.update_position(0.5)
    assert boid.position.x == approx(25.0)
    assert boid.position.y == approx(0.0)


def test_randomize_velocity_uses_min_speed():
    config = _quiet_config(min_speed=7.0)
    boid = _boid(config, 0, 0)
    rng = DeterministicRng(3)
    for _ in range(5):
        boid.randomize_velocity(rng)
        assert boid.velocity.length() == approx(7.0)


def test_snapshot_exposes_render_fields():
    config = _quiet_config(size=12, shape=Shape.CIRCLE, color="#00ff00")
    boid = _boid(config, 1, 2, 0, 3)
    snapshot = boid.snapshot()
    assert (snapshot.x, snapshot.y, snapshot.vx, snapshot.vy) == (1, 2, 0, 3)
    assert snapshot.size == 12
    assert snapshot.shape is Shape.CIRCLE
    assert snapshot.color == "#00ff00"
    assert snapshot.heading == approx(1.5707963, abs=1e-6)
