"""
SpoolView — Compressor / Turbine Stage Builder

A stage is one drum plus a ring of identical radial blades, all centred at
a single axial position on the engine axis. Compressor and turbine stages
are two configurations of the same builder; they differ only in the sense
of the blade twist and in their default proportions.

Blade placement for blade i of n:
    angle_i = i / n * 2*pi
    T(z) . Rz(angle_i) . Ry(sign * twist * pi) . blade_local
where blade_local is a thin box standing on the +y (radial) axis from the
root radius outward. The twist is therefore about the blade's own radial
axis, and every blade in a ring is congruent to every other one under a
rotation about z.
"""

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from spoolview.geometry.primitives import (
    Primitive, compose, rotation_y, rotation_z, translation,
)


MIN_BLADE_SPAN = 0.08          # Floor for degenerate (root >= tip) stages
BLADE_LENGTH_FRACTION = 0.95   # Visible blade length / span
DRUM_RADIUS_FRACTION = 0.8     # Drum radius / stage radius (tip gap)
DEFAULT_TWIST = 0.16           # Fraction of pi


class StageKind(Enum):
    COMPRESSOR = "compressor"
    TURBINE = "turbine"

    @property
    def twist_sign(self) -> float:
        # Compressor blades lean one way, turbine blades the other
        return -1.0 if self is StageKind.COMPRESSOR else 1.0


STAGE_DEFAULTS = {
    StageKind.COMPRESSOR: {'drum_length': 0.3, 'blade_thickness': 0.026, 'drum_segments': 36},
    StageKind.TURBINE: {'drum_length': 0.18, 'blade_thickness': 0.02, 'drum_segments': 32},
}


@dataclass(frozen=True)
class StageSpec:
    """Immutable description of one compressor or turbine ring."""
    kind: StageKind
    radius: float                      # Nominal outer (blade tip) radius
    root_radius: float                 # Blade attachment radius
    z: float                           # Axial position
    blade_count: int
    blade_twist: float = DEFAULT_TWIST  # Fraction of pi
    blade_material: str = "core"
    drum_material: str = "core"
    drum_length: Optional[float] = None
    blade_thickness: Optional[float] = None
    name: str = ""

    @property
    def resolved_drum_length(self) -> float:
        if self.drum_length is not None:
            return self.drum_length
        return STAGE_DEFAULTS[self.kind]['drum_length']

    @property
    def resolved_blade_thickness(self) -> float:
        if self.blade_thickness is not None:
            return self.blade_thickness
        return STAGE_DEFAULTS[self.kind]['blade_thickness']

    @property
    def twist_angle(self) -> float:
        """Signed twist about the radial axis (rad)."""
        return self.kind.twist_sign * self.blade_twist * np.pi


@dataclass
class StageGeometry:
    """Output of build_stage: the drum and its blade ring."""
    spec: StageSpec
    drum: Primitive
    blades: List[Primitive] = field(default_factory=list)

    def primitives(self) -> List[Primitive]:
        return [self.drum] + list(self.blades)

    @property
    def blade_angles(self) -> List[float]:
        return [b.angular_position for b in self.blades]


def blade_span(radius: float, root_radius: float) -> float:
    return max(MIN_BLADE_SPAN, radius - root_radius)


def blade_angles(blade_count: int) -> np.ndarray:
    """Uniform angular positions i/n * 2pi, i = 0..n-1 (empty for n <= 0)."""
    if blade_count <= 0:
        return np.array([])
    return np.arange(blade_count) / blade_count * 2 * np.pi


def radial_blade(root_radius: float, span: float, thickness: float = 0.03,
                 material: str = "core") -> Primitive:
    """
    Thin box standing on the +y axis, spanning root_radius to
    root_radius + 0.95 * span. Tangential width = thickness, axial
    depth = thickness / 2.
    """
    length = span * BLADE_LENGTH_FRACTION
    return Primitive(
        kind='box',
        dims={'x': thickness, 'y': length, 'z': thickness * 0.5},
        material=material,
        transform=translation(0.0, root_radius + length * 0.5, 0.0),
        name='blade',
    )


def place_blade(blade: Primitive, z: float, angle: float, twist_angle: float) -> Primitive:
    placed = blade.transformed(compose(translation(0.0, 0.0, z),
                                       rotation_z(angle),
                                       rotation_y(twist_angle)))
    placed.angular_position = float(angle)
    return placed


def build_stage(spec: StageSpec) -> StageGeometry:
    """
    Generate the drum and blade ring for one stage.

    Deterministic: two calls with equal specs return congruent geometry.
    Malformed specs degrade instead of failing (root >= tip gives the
    minimum span, blade_count <= 0 gives a drum with no blades).
    """
    drum = Primitive(
        kind='cylinder',
        dims={
            'radius': spec.radius * DRUM_RADIUS_FRACTION,
            'length': spec.resolved_drum_length,
            'segments': STAGE_DEFAULTS[spec.kind]['drum_segments'],
        },
        material=spec.drum_material,
        transform=translation(0.0, 0.0, spec.z),
        name=f'{spec.name}_drum' if spec.name else 'drum',
    )

    span = blade_span(spec.radius, spec.root_radius)
    template = radial_blade(spec.root_radius, span,
                            spec.resolved_blade_thickness, spec.blade_material)
    if spec.name:
        template.name = f'{spec.name}_blade'

    blades = [place_blade(template, spec.z, angle, spec.twist_angle)
              for angle in blade_angles(spec.blade_count)]

    return StageGeometry(spec=spec, drum=drum, blades=blades)
