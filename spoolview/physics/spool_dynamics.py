"""
SpoolView — Spool Speed Dynamics

First-order model mapping a throttle setting in [0, 1] to two spool
speeds, N1 (fan / low-pressure spool) and N2 (core / high-pressure
spool), expressed as percent of a nominal maximum:

    target_N1 = 20 + 80 * throttle        (idle 20 %, take-off 100 %)
    target_N2 = 60 + 40 * throttle        (idle 60 %, take-off 100 %)
    N += (target - N) * (1 - exp(-dt / tau)),   tau = 0.7 s

The update is an exact discretisation of a first-order lag, so it never
overshoots and settles in the same wall time regardless of frame rate.
Every input is clamped rather than rejected; there are no error states.
"""

import math
import numbers
from dataclasses import dataclass, field
from typing import List, Mapping, Tuple


@dataclass(frozen=True)
class SpoolRates:
    """Idle and maximum rotational rate (rev/s) of one spool's animation."""
    base_rps: float
    max_rps: float


N1_RATES = SpoolRates(base_rps=8.0, max_rps=40.0)
N2_RATES = SpoolRates(base_rps=15.0, max_rps=65.0)


@dataclass
class SpoolDynamicsParams:
    tau_s: float = 0.7
    n1_idle_pct: float = 20.0
    n1_span_pct: float = 80.0
    n2_idle_pct: float = 60.0
    n2_span_pct: float = 40.0
    min_dt_s: float = 0.001
    n1_rates: SpoolRates = N1_RATES
    n2_rates: SpoolRates = N2_RATES


@dataclass
class SpoolState:
    """Dynamic condition of one spool."""
    percent: float = 0.0
    target_percent: float = 0.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_throttle(value) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v):
        return 0.0
    return clamp(v, 0.0, 1.0)


def throttle_from_slider(value) -> float:
    """Slider position 0..100 -> throttle 0..1."""
    try:
        return clamp_throttle(float(value) / 100.0)
    except (TypeError, ValueError):
        return 0.0


def slider_from_throttle(throttle: float) -> int:
    # Half-up, as a browser's Math.round does
    return int(math.floor(clamp_throttle(throttle) * 100 + 0.5))


def smoothing_alpha(dt: float, tau: float) -> float:
    return 1.0 - math.exp(-dt / tau)


def percent_to_angular_velocity(percent: float, base_rate: float, max_rate: float) -> float:
    """
    Map a spool percent onto [base_rate, max_rate] (rev/s) and return rad/s.
    The fraction percent/100 is clamped to [0, 1].
    """
    frac = clamp(percent / 100.0, 0.0, 1.0)
    rps = base_rate + frac * (max_rate - base_rate)
    return rps * 2 * math.pi


def _is_number(value) -> bool:
    return (isinstance(value, numbers.Real) and not isinstance(value, bool)
            and math.isfinite(value))


@dataclass
class SpoolDynamics:
    """Throttle plus the N1 / N2 spool states, advanced one tick at a time."""
    params: SpoolDynamicsParams = field(default_factory=SpoolDynamicsParams)
    throttle: float = 0.0
    n1: SpoolState = field(default_factory=SpoolState)
    n2: SpoolState = field(default_factory=SpoolState)

    def __post_init__(self):
        self.throttle = clamp_throttle(self.throttle)

    def set_throttle(self, value: float) -> float:
        """Store the clamped throttle; takes effect on the next advance()."""
        self.throttle = clamp_throttle(value)
        return self.throttle

    def targets(self) -> Tuple[float, float]:
        p = self.params
        return (p.n1_idle_pct + self.throttle * p.n1_span_pct,
                p.n2_idle_pct + self.throttle * p.n2_span_pct)

    def advance(self, dt: float) -> Tuple[float, float]:
        """
        Move both spools toward their throttle targets over dt seconds.
        dt is floored at params.min_dt_s. Returns (N1 %, N2 %).
        """
        dt = max(self.params.min_dt_s, float(dt))
        alpha = smoothing_alpha(dt, self.params.tau_s)

        target_n1, target_n2 = self.targets()
        self.n1.target_percent = target_n1
        self.n2.target_percent = target_n2
        self.n1.percent += (target_n1 - self.n1.percent) * alpha
        self.n2.percent += (target_n2 - self.n2.percent) * alpha
        return self.n1.percent, self.n2.percent

    def angular_velocities(self) -> Tuple[float, float]:
        """(N1, N2) in rad/s."""
        r1, r2 = self.params.n1_rates, self.params.n2_rates
        return (percent_to_angular_velocity(self.n1.percent, r1.base_rps, r1.max_rps),
                percent_to_angular_velocity(self.n2.percent, r2.base_rps, r2.max_rps))

    def apply_sim_update(self, update: Mapping) -> List[str]:
        """
        Out-of-band override from an external simulation feed.

        Accepts any subset of {throttle, n1, n2}. Fields that are present
        and numeric overwrite state directly (no smoothing); anything else
        is left untouched. Returns the names of the fields applied.
        """
        applied = []
        if _is_number(update.get('throttle')):
            self.throttle = clamp_throttle(update['throttle'])
            applied.append('throttle')
        if _is_number(update.get('n1')):
            self.n1.percent = float(update['n1'])
            applied.append('n1')
        if _is_number(update.get('n2')):
            self.n2.percent = float(update['n2'])
            applied.append('n2')
        return applied

    @property
    def slider(self) -> int:
        return slider_from_throttle(self.throttle)
