import math

import numpy as np
import pytest

from spoolview.physics.simulation import (
    EngineAnimator,
    FrameClock,
    format_percent,
    print_run_summary,
    run_throttle_schedule,
    settle_time,
)


def test_tick_clamps_dt_to_floor() -> None:
    animator = EngineAnimator()
    frame = animator.tick(0.0)

    assert frame.dt == pytest.approx(0.001)
    assert animator.frames == 1


def test_rotation_uses_post_advance_velocity() -> None:
    animator = EngineAnimator()
    animator.set_throttle(1.0)
    frame = animator.tick(0.02)

    assert frame.spool_1_angle == pytest.approx(frame.n1_rad_s * 0.02)
    assert frame.spool_2_angle == pytest.approx(frame.n2_rad_s * 0.02)


def test_spools_turn_independently() -> None:
    animator = EngineAnimator()
    animator.apply_sim_update({"n1": 0.0, "n2": 100.0})
    w1, w2 = animator.dynamics.angular_velocities()

    assert w2 > w1
    frame = animator.tick(0.001)
    assert frame.spool_2_angle > frame.spool_1_angle


def test_static_structure_never_rotates() -> None:
    animator = EngineAnimator()
    before = [p.transform.copy() for p in animator.layout.static]
    animator.set_throttle(1.0)
    for _ in range(30):
        animator.tick(1 / 60)

    after = [p.transform for p in animator.layout.static]
    assert all(np.array_equal(a, b) for a, b in zip(before, after))


def test_stage_primitives_are_not_mutated_by_ticks() -> None:
    animator = EngineAnimator()
    blade = animator.layout.spool_1.primitives[5]
    before = blade.transform.copy()
    animator.tick(0.5)

    assert np.array_equal(blade.transform, before)
    assert animator.layout.spool_1.angle > 0.0


def test_telemetry_is_formatted_to_one_decimal() -> None:
    animator = EngineAnimator()
    animator.apply_sim_update({"n1": 5.04, "n2": 61.25})
    frame = animator.snapshot()

    assert frame.n1_text == "5.0"
    assert frame.n2_text == "61.2" or frame.n2_text == "61.3"
    assert format_percent(99.96) == "100.0"
    assert frame.dt == 0.0


def test_override_updates_slider() -> None:
    animator = EngineAnimator()
    animator.apply_sim_update({"throttle": 0.42})

    assert animator.snapshot().slider == 42


def test_set_slider_divides_by_hundred() -> None:
    animator = EngineAnimator()
    assert animator.set_slider(75) == pytest.approx(0.75)
    assert animator.set_slider(300) == 1.0


def test_frame_clock_measures_wall_time() -> None:
    clock_time = {"t": 10.0}
    clock = FrameClock(now=lambda: clock_time["t"])

    clock_time["t"] = 10.25
    assert clock.tick() == pytest.approx(0.25)
    # No time passed: floored
    assert clock.tick() == pytest.approx(0.001)
    clock_time["t"] = 9.0
    assert clock.tick() == pytest.approx(0.001)

    clock_time["t"] = 50.0
    clock.reset()
    clock_time["t"] = 50.5
    assert clock.tick() == pytest.approx(0.5)


def test_run_throttle_schedule_columns_and_length() -> None:
    df = run_throttle_schedule([(0.0, 0.0), (1.0, 1.0)], duration_s=3.0, dt=0.05)

    assert len(df) == 60
    assert {
        "time_s", "throttle", "n1_pct", "n2_pct", "n1_target_pct",
        "n2_target_pct", "n1_rad_s", "n2_rad_s", "spool_1_angle", "spool_2_angle",
    }.issubset(df.columns)
    assert df["throttle"].iloc[0] == 0.0
    assert df["throttle"].iloc[-1] == 1.0


def test_run_never_overshoots_targets() -> None:
    df = run_throttle_schedule([(0.0, 0.0), (0.5, 1.0)], duration_s=5.0, dt=1 / 60)

    assert (df["n1_pct"] <= df["n1_target_pct"] + 1e-9).all()
    assert (df["n2_pct"] <= df["n2_target_pct"] + 1e-9).all()
    assert (df["n1_pct"].diff().dropna() >= 0).all()
    assert df["spool_1_angle"].between(0.0, 2 * math.pi).all()


def test_run_spool_down_is_monotone() -> None:
    df = run_throttle_schedule([(0.0, 1.0), (3.0, 0.0)], duration_s=8.0, dt=0.02)
    down = df[df["time_s"] > 3.05]

    assert (down["n1_pct"].diff().dropna() <= 0).all()
    assert down["n1_pct"].iloc[-1] == pytest.approx(20.0, abs=1.0)


def test_settle_time_matches_time_constant() -> None:
    df = run_throttle_schedule([(0.0, 1.0)], duration_s=10.0, dt=1 / 60)
    ts = settle_time(df, "n1_pct", 100.0, tolerance=0.5)

    # 100 * exp(-t / 0.7) < 0.5  ->  t > 0.7 * ln(200) ~= 3.71 s
    assert ts is not None
    assert 3.6 < ts < 3.85


def test_settle_time_none_when_not_settled() -> None:
    df = run_throttle_schedule([(0.0, 1.0)], duration_s=1.0, dt=0.05)
    assert settle_time(df, "n1_pct", 100.0, tolerance=0.5) is None


@pytest.mark.parametrize("kwargs", [{"duration_s": 0.0}, {"duration_s": 1.0, "dt": 0.0}])
def test_run_rejects_bad_configuration(kwargs) -> None:
    with pytest.raises(ValueError):
        run_throttle_schedule([(0.0, 0.5)], **kwargs)


def test_print_run_summary(capsys) -> None:
    df = run_throttle_schedule([(0.0, 0.5)], duration_s=2.0, dt=0.1)
    print_run_summary(df)
    out = capsys.readouterr().out

    assert "Throttle Run" in out
    assert "N1" in out


def test_run_shorter_than_one_tick_still_steps_once(capsys) -> None:
    df = run_throttle_schedule([(0.0, 1.0)], duration_s=0.005, dt=1 / 60)

    assert len(df) == 1
    assert df["n1_pct"].iloc[0] > 0.0
    print_run_summary(df)
    assert "Throttle Run" in capsys.readouterr().out
