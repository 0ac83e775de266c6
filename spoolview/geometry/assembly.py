"""
SpoolView — Full Engine Assembly Module

Lays out a stylised two-spool turbofan along the engine axis, front to back:

    fan + booster (N1)  ->  HPC + core drum (N2)  ->  combustor (static)
    ->  HPT (N2)  ->  LPT (N1)  ->  shaft, exhaust cone, nacelle (static)

Everything on one spool shares a single rigid rotation about the axis.
Static structures sit directly under the engine root and never spin.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from spoolview.geometry.primitives import (
    Primitive, compose, rotation_x, rotation_y, rotation_z, scaling, translation,
)
from spoolview.geometry.stage import (
    StageKind, StageSpec, StageGeometry, blade_angles, blade_span,
    build_stage, place_blade, radial_blade,
)


TWO_PI = 2 * np.pi


@dataclass
class EngineLayoutParams:
    """Design constants for the whole engine (scene units)."""
    hub_radius: float = 0.35

    # Fan (N1)
    fan_z: float = 0.0
    fan_radius: float = 1.8
    fan_blade_count: int = 22
    fan_blade_thickness: float = 0.09
    fan_blade_twist: float = 0.22
    fan_root_factor: float = 1.2        # x hub radius
    hub_length: float = 0.4
    spinner_radius: float = 0.4
    spinner_length: float = 0.8
    spinner_offset: float = 0.45

    # Booster / LPC (N1)
    booster_stages: int = 3
    booster_base_z: float = 0.8
    booster_z_step: float = 0.55
    booster_radius: float = 1.35
    booster_radius_step: float = 0.18
    booster_blade_count: int = 24
    booster_blade_step: int = 6
    booster_twist: float = 0.16
    booster_root_factor: float = 1.2
    booster_drum_length: float = 0.3

    # HPC (N2)
    hpc_stages: int = 3
    hpc_base_z: float = 2.4
    hpc_z_step: float = 0.45
    hpc_radius: float = 1.0
    hpc_radius_step: float = 0.12
    hpc_blade_count: int = 28
    hpc_blade_step: int = 6
    hpc_twist: float = 0.18
    hpc_root_factor: float = 1.4
    hpc_drum_length: float = 0.26

    # Core drum (N2)
    core_drum_radius: float = 0.55
    core_drum_length: float = 2.3
    core_drum_z: float = 3.3

    # Combustor (static)
    combustor_z: float = 4.1
    combustor_radius: float = 0.55
    combustor_tube_radius: float = 0.12

    # HPT (N2): (radius, z, blades, twist)
    hpt_table: Tuple[Tuple[float, float, int, float], ...] = (
        (0.65, 4.5, 18, 0.15),
        (0.55, 4.9, 18, 0.16),
    )
    # LPT (N1): (radius, z, blades, twist, root_radius, thickness)
    # Axial order is intentionally not monotonic.
    lpt_table: Tuple[Tuple[float, float, int, float, float, float], ...] = (
        (1.1, 5.5, 16, 0.14, 0.20, 0.03),
        (0.65, 4.0, 16, 0.14, 0.18, 0.03),
        (0.7, 5.15, 13, 0.14, 0.18, 0.05),
    )

    # Shaft, exhaust, nacelle (static)
    shaft_radius: float = 0.12
    shaft_length: float = 7.2
    shaft_z: float = 3.6
    exhaust_radius: float = 0.62
    exhaust_length: float = 1.8
    exhaust_z: float = 7.1
    nacelle_radius: float = 1.9
    nacelle_length: float = 8.0
    nacelle_z: float = 3.8

    # Scene placement
    spool_offset_z: float = 0.4
    root_scale: float = 0.65
    root_yaw: float = 0.32              # Fraction of pi, about y
    root_pitch: float = -0.08           # Fraction of pi, about x


@dataclass
class RotatingAssembly:
    """All geometry sharing one spool's rigid rotation."""
    name: str
    spool: str                          # "N1" or "N2"
    offset_z: float = 0.0
    angle: float = 0.0
    primitives: List[Primitive] = field(default_factory=list)
    stages: List[StageGeometry] = field(default_factory=list)

    def add(self, primitive: Primitive) -> Primitive:
        self.primitives.append(primitive)
        return primitive

    def add_stage(self, spec: StageSpec) -> StageGeometry:
        stage = build_stage(spec)
        self.stages.append(stage)
        self.primitives.extend(stage.primitives())
        return stage

    def rotate(self, delta: float) -> float:
        """Advance the spool angle by delta rad; angle is kept in [0, 2pi)."""
        self.angle = float(np.mod(self.angle + delta, TWO_PI))
        return self.angle

    def world_transform(self) -> np.ndarray:
        """Group frame -> engine frame."""
        return compose(translation(0.0, 0.0, self.offset_z), rotation_z(self.angle))

    @property
    def blade_count(self) -> int:
        return sum(1 for p in self.primitives if p.angular_position is not None)


@dataclass
class EngineLayout:
    """Complete engine: two spools plus static structure."""
    params: EngineLayoutParams
    spool_1: RotatingAssembly
    spool_2: RotatingAssembly
    static: List[Primitive] = field(default_factory=list)
    stage_specs: List[Tuple[str, StageSpec]] = field(default_factory=list)

    def assemblies(self) -> List[RotatingAssembly]:
        return [self.spool_1, self.spool_2]

    def root_transform(self) -> np.ndarray:
        """Engine frame -> world (three.js XYZ Euler order, then scale)."""
        p = self.params
        return compose(rotation_x(p.root_pitch * np.pi),
                       rotation_y(p.root_yaw * np.pi),
                       scaling(p.root_scale))

    def blade_count(self) -> int:
        return sum(a.blade_count for a in self.assemblies())

    def primitive_count(self) -> int:
        return sum(len(a.primitives) for a in self.assemblies()) + len(self.static)

    def axial_extent(self) -> Tuple[float, float]:
        """Min / max z of every primitive origin in the engine frame."""
        zs = [p.origin[2] for p in self.static]
        for asm in self.assemblies():
            zs.extend(p.origin[2] + asm.offset_z for p in asm.primitives)
        return float(min(zs)), float(max(zs))


def booster_specs(params: EngineLayoutParams) -> List[StageSpec]:
    root = params.hub_radius * params.booster_root_factor
    return [
        StageSpec(
            kind=StageKind.COMPRESSOR,
            radius=params.booster_radius - s * params.booster_radius_step,
            root_radius=root,
            z=params.booster_base_z + s * params.booster_z_step,
            blade_count=params.booster_blade_count + s * params.booster_blade_step,
            blade_twist=params.booster_twist,
            blade_material='fan_le',
            drum_material='booster_drum',
            drum_length=params.booster_drum_length,
            name=f'booster_{s + 1}',
        )
        for s in range(params.booster_stages)
    ]


def hpc_specs(params: EngineLayoutParams) -> List[StageSpec]:
    root = params.hub_radius * params.hpc_root_factor
    return [
        StageSpec(
            kind=StageKind.COMPRESSOR,
            radius=params.hpc_radius - s * params.hpc_radius_step,
            root_radius=root,
            z=params.hpc_base_z + s * params.hpc_z_step,
            blade_count=params.hpc_blade_count + s * params.hpc_blade_step,
            blade_twist=params.hpc_twist,
            blade_material='core',
            drum_material='hpc_drum',
            drum_length=params.hpc_drum_length,
            name=f'hpc_{s + 1}',
        )
        for s in range(params.hpc_stages)
    ]


def hpt_specs(params: EngineLayoutParams) -> List[StageSpec]:
    return [
        StageSpec(
            kind=StageKind.TURBINE,
            radius=radius,
            root_radius=0.25,
            z=z,
            blade_count=blades,
            blade_twist=twist,
            blade_material='hpt',
            drum_material='hpt',
            name=f'hpt_{i + 1}',
        )
        for i, (radius, z, blades, twist) in enumerate(params.hpt_table)
    ]


def lpt_specs(params: EngineLayoutParams) -> List[StageSpec]:
    return [
        StageSpec(
            kind=StageKind.TURBINE,
            radius=radius,
            root_radius=root,
            z=z,
            blade_count=blades,
            blade_twist=twist,
            blade_material='lpt',
            drum_material='lpt',
            blade_thickness=thickness,
            name=f'lpt_{i + 1}',
        )
        for i, (radius, z, blades, twist, root, thickness) in enumerate(params.lpt_table)
    ]


def _build_fan(spool: RotatingAssembly, params: EngineLayoutParams):
    """Hub, spinner and the fan blade ring (no drum)."""
    spool.add(Primitive(
        kind='cylinder',
        dims={'radius': params.hub_radius, 'length': params.hub_length, 'segments': 48},
        material='hub',
        transform=translation(0.0, 0.0, params.fan_z),
        name='fan_hub',
    ))
    spool.add(Primitive(
        kind='cone',
        dims={'radius': params.spinner_radius, 'length': params.spinner_length, 'segments': 48},
        material='hub',
        transform=translation(0.0, 0.0, params.fan_z + params.spinner_offset),
        name='spinner',
    ))

    root = params.hub_radius * params.fan_root_factor
    template = radial_blade(root, blade_span(params.fan_radius, root),
                            params.fan_blade_thickness, 'fan')
    template.name = 'fan_blade'
    twist = StageKind.COMPRESSOR.twist_sign * params.fan_blade_twist * np.pi
    for angle in blade_angles(params.fan_blade_count):
        spool.add(place_blade(template, params.fan_z, angle, twist))


def _build_static(params: EngineLayoutParams) -> List[Primitive]:
    torus_dims = {
        'radius': params.combustor_radius,
        'tube_radius': params.combustor_tube_radius,
        'radial_segments': 16,
        'tubular_segments': 64,
    }
    return [
        # Two crossed tori at the same station
        Primitive(
            kind='torus', dims=dict(torus_dims), material='combustor',
            transform=compose(translation(0.0, 0.0, params.combustor_z), rotation_x(np.pi / 2)),
            name='combustor_a',
        ),
        Primitive(
            kind='torus', dims=dict(torus_dims), material='combustor',
            transform=compose(translation(0.0, 0.0, params.combustor_z), rotation_z(np.pi / 2)),
            name='combustor_b',
        ),
        Primitive(
            kind='cylinder',
            dims={'radius': params.shaft_radius, 'length': params.shaft_length, 'segments': 24},
            material='shaft',
            transform=translation(0.0, 0.0, params.shaft_z),
            name='main_shaft',
        ),
        Primitive(
            kind='cone',
            dims={'radius': params.exhaust_radius, 'length': params.exhaust_length, 'segments': 32},
            material='core',
            transform=translation(0.0, 0.0, params.exhaust_z),
            name='exhaust_cone',
        ),
        Primitive(
            kind='shell',
            dims={'radius': params.nacelle_radius, 'length': params.nacelle_length, 'segments': 64},
            material='nacelle',
            transform=translation(0.0, 0.0, params.nacelle_z),
            name='nacelle',
        ),
    ]


def assemble_engine(params: Optional[EngineLayoutParams] = None) -> EngineLayout:
    """
    Build the complete engine skeleton in its fixed front-to-back order.
    Pure apart from the returned structure; runs once at start-up.
    """
    if params is None:
        params = EngineLayoutParams()

    spool_1 = RotatingAssembly(name='spool_1', spool='N1', offset_z=params.spool_offset_z)
    spool_2 = RotatingAssembly(name='spool_2', spool='N2', offset_z=params.spool_offset_z)
    layout = EngineLayout(params=params, spool_1=spool_1, spool_2=spool_2)

    # Front: fan + booster on N1
    _build_fan(spool_1, params)
    for spec in booster_specs(params):
        spool_1.add_stage(spec)
        layout.stage_specs.append((spool_1.name, spec))

    # Core: HPC + core drum on N2
    for spec in hpc_specs(params):
        spool_2.add_stage(spec)
        layout.stage_specs.append((spool_2.name, spec))
    spool_2.add(Primitive(
        kind='cylinder',
        dims={'radius': params.core_drum_radius, 'length': params.core_drum_length, 'segments': 32},
        material='core',
        transform=translation(0.0, 0.0, params.core_drum_z),
        name='core_drum',
    ))

    # Turbines: HPT on N2, LPT on N1
    for spec in hpt_specs(params):
        spool_2.add_stage(spec)
        layout.stage_specs.append((spool_2.name, spec))
    for spec in lpt_specs(params):
        spool_1.add_stage(spec)
        layout.stage_specs.append((spool_1.name, spec))

    # Combustor, shaft, exhaust, nacelle
    layout.static = _build_static(params)

    return layout


def print_engine_summary(layout: EngineLayout):
    """Print the stage table and part counts."""
    z_min, z_max = layout.axial_extent()
    print(f"\n{'='*60}")
    print(f"  SpoolView Engine Layout")
    print(f"{'='*60}")
    print(f"\n  Axial extent:   z = {z_min:.2f} .. {z_max:.2f}")
    print(f"  Primitives:     {layout.primitive_count()}")
    print(f"  Blades:         {layout.blade_count()} "
          f"(N1 {layout.spool_1.blade_count}, N2 {layout.spool_2.blade_count})")

    print(f"\n  Stages (front to back as built):")
    for asm_name, spec in layout.stage_specs:
        spool = layout.spool_1.spool if asm_name == layout.spool_1.name else layout.spool_2.spool
        print(f"    {spec.name:10s} {spec.kind.value:10s} r={spec.radius:5.2f}  "
              f"z={spec.z:5.2f}  blades={spec.blade_count:3d}  "
              f"twist={spec.twist_angle:+.3f} rad  [{spool}]")

    print(f"\n  Static structure:")
    for prim in layout.static:
        print(f"    {prim.name:13s} {prim.kind:9s} z={prim.origin[2]:5.2f}")
    print(f"{'='*60}\n")


if __name__ == "__main__":
    print_engine_summary(assemble_engine())
