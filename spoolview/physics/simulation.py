"""
SpoolView — Frame Integration

Composes the spool dynamics with the assembled geometry. One tick:

    1. clamp dt to a small positive floor
    2. advance N1 / N2 toward their throttle targets
    3. turn each spool group by its angular velocity * dt
    4. publish telemetry (N1 %, N2 %, one decimal)

Drawing happens after tick() returns, in whatever host drives the loop
(the browser viewer, or nothing at all for headless runs).
"""

import logging
import time
from dataclasses import dataclass, asdict
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from spoolview.geometry.assembly import EngineLayout, assemble_engine
from spoolview.physics.spool_dynamics import (
    SpoolDynamics, clamp_throttle, throttle_from_slider,
)

logger = logging.getLogger(__name__)


def format_percent(value: float) -> str:
    """Telemetry readout: one decimal place."""
    return f"{value:.1f}"


class FrameClock:
    """Wall-clock dt between successive ticks, floored at min_dt."""

    def __init__(self, now: Callable[[], float] = time.perf_counter, min_dt: float = 0.001):
        self._now = now
        self.min_dt = min_dt
        self.last = now()

    def tick(self) -> float:
        current = self._now()
        dt = max(self.min_dt, current - self.last)
        self.last = current
        return dt

    def reset(self):
        self.last = self._now()


@dataclass
class FrameTelemetry:
    n1_pct: float
    n2_pct: float
    n1_text: str
    n2_text: str
    n1_rad_s: float
    n2_rad_s: float
    spool_1_angle: float
    spool_2_angle: float
    throttle: float
    slider: int
    dt: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


class EngineAnimator:
    """Owns one SpoolDynamics and one EngineLayout and steps them together."""

    def __init__(self, layout: Optional[EngineLayout] = None,
                 dynamics: Optional[SpoolDynamics] = None):
        self.layout = layout if layout is not None else assemble_engine()
        self.dynamics = dynamics if dynamics is not None else SpoolDynamics()
        self.elapsed_s = 0.0
        self.frames = 0

    @property
    def min_dt(self) -> float:
        return self.dynamics.params.min_dt_s

    def set_throttle(self, value: float) -> float:
        return self.dynamics.set_throttle(value)

    def set_slider(self, value) -> float:
        return self.dynamics.set_throttle(throttle_from_slider(value))

    def apply_sim_update(self, update: Mapping) -> List[str]:
        applied = self.dynamics.apply_sim_update(update)
        if applied:
            logger.debug("Simulation update applied: %s", ", ".join(applied))
        return applied

    def tick(self, dt: float) -> FrameTelemetry:
        dt = max(self.min_dt, float(dt))

        self.dynamics.advance(dt)
        w1, w2 = self.dynamics.angular_velocities()
        self.layout.spool_1.rotate(w1 * dt)
        self.layout.spool_2.rotate(w2 * dt)

        self.elapsed_s += dt
        self.frames += 1
        return self._telemetry(w1, w2, dt)

    def snapshot(self) -> FrameTelemetry:
        """Current telemetry without advancing time."""
        w1, w2 = self.dynamics.angular_velocities()
        return self._telemetry(w1, w2, 0.0)

    def _telemetry(self, w1: float, w2: float, dt: float) -> FrameTelemetry:
        d = self.dynamics
        return FrameTelemetry(
            n1_pct=d.n1.percent,
            n2_pct=d.n2.percent,
            n1_text=format_percent(d.n1.percent),
            n2_text=format_percent(d.n2.percent),
            n1_rad_s=w1,
            n2_rad_s=w2,
            spool_1_angle=self.layout.spool_1.angle,
            spool_2_angle=self.layout.spool_2.angle,
            throttle=d.throttle,
            slider=d.slider,
            dt=dt,
        )


def _throttle_at(schedule: Sequence[Tuple[float, float]], t: float) -> float:
    """Step schedule: the last (time, throttle) entry with time <= t."""
    value = 0.0
    for start, throttle in schedule:
        if t + 1e-12 >= start:
            value = throttle
        else:
            break
    return clamp_throttle(value)


def run_throttle_schedule(schedule: Sequence[Tuple[float, float]],
                          duration_s: float,
                          dt: float = 1.0 / 60.0,
                          animator: Optional[EngineAnimator] = None) -> pd.DataFrame:
    """
    Headless, deterministic run of the frame loop.

    schedule: (time_s, throttle) steps, e.g. [(0, 0.0), (2, 1.0)].
    Returns one row per tick.
    """
    if duration_s <= 0:
        raise ValueError("duration_s must be positive")
    if dt <= 0:
        raise ValueError("dt must be positive")

    animator = animator if animator is not None else EngineAnimator()
    steps = sorted((float(t), float(v)) for t, v in schedule)
    # At least one tick for any positive duration
    n_ticks = max(1, int(round(duration_s / dt)))

    rows = []
    t = 0.0
    for _ in range(n_ticks):
        animator.set_throttle(_throttle_at(steps, t))
        frame = animator.tick(dt)
        t += dt
        n1_target, n2_target = animator.dynamics.targets()
        rows.append({
            'time_s': t,
            'throttle': frame.throttle,
            'n1_pct': frame.n1_pct,
            'n2_pct': frame.n2_pct,
            'n1_target_pct': n1_target,
            'n2_target_pct': n2_target,
            'n1_rad_s': frame.n1_rad_s,
            'n2_rad_s': frame.n2_rad_s,
            'spool_1_angle': frame.spool_1_angle,
            'spool_2_angle': frame.spool_2_angle,
        })

    logger.info("Throttle run: %d ticks, dt=%.4f s", n_ticks, dt)
    return pd.DataFrame(rows)


def settle_time(df: pd.DataFrame, column: str, target: float,
                tolerance: float = 0.5) -> Optional[float]:
    """First time after which `column` stays within tolerance of target."""
    outside = (df[column] - target).abs() > tolerance
    if not outside.any():
        return float(df['time_s'].iloc[0]) if len(df) else None
    last_outside = outside[outside].index[-1]
    pos = df.index.get_loc(last_outside)
    if pos + 1 >= len(df):
        return None
    return float(df['time_s'].iloc[pos + 1])


def print_run_summary(df: pd.DataFrame):
    """Console summary of a headless throttle run."""
    final = df.iloc[-1]
    print(f"\n{'='*55}")
    print(f"  SpoolView Throttle Run")
    print(f"{'='*55}")
    print(f"  Duration:       {final['time_s']:.2f} s  ({len(df)} ticks)")
    print(f"  Final throttle: {final['throttle']*100:.0f} %")
    print(f"  N1:             {format_percent(final['n1_pct'])} %  "
          f"(target {final['n1_target_pct']:.1f}, {final['n1_rad_s']:.1f} rad/s)")
    print(f"  N2:             {format_percent(final['n2_pct'])} %  "
          f"(target {final['n2_target_pct']:.1f}, {final['n2_rad_s']:.1f} rad/s)")
    for col, target_col in [('n1_pct', 'n1_target_pct'), ('n2_pct', 'n2_target_pct')]:
        ts = settle_time(df, col, final[target_col])
        label = f"{ts:.2f} s" if ts is not None else "not settled"
        print(f"  {col[:2].upper()} settle (±0.5): {label}")
    print(f"{'='*55}\n")


if __name__ == "__main__":
    df = run_throttle_schedule([(0.0, 0.0), (1.0, 1.0), (5.0, 0.3)], duration_s=8.0)
    print_run_summary(df)
