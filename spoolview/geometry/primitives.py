"""
SpoolView — Drawable Primitives

A primitive is one simple shape (box, cylinder, cone, torus or open shell)
plus a 4x4 homogeneous transform into its owning group's frame. Stages,
spools and static structures are all just lists of these.

Conventions:
- The engine axis is +z (fan at z=0, exhaust aft).
- Cylinders, cones and shells are built along z, centred on their origin.
- A cone's apex points toward +z.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Optional


PRIMITIVE_KINDS = ('box', 'cylinder', 'cone', 'torus', 'shell')


def translation(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = [x, y, z]
    return m


def rotation_x(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    m = np.eye(4)
    m[1, 1], m[1, 2] = c, -s
    m[2, 1], m[2, 2] = s, c
    return m


def rotation_y(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    m = np.eye(4)
    m[0, 0], m[0, 2] = c, s
    m[2, 0], m[2, 2] = -s, c
    return m


def rotation_z(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    m = np.eye(4)
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


def scaling(sx: float, sy: Optional[float] = None, sz: Optional[float] = None) -> np.ndarray:
    sy = sx if sy is None else sy
    sz = sx if sz is None else sz
    return np.diag([sx, sy, sz, 1.0])


def compose(*matrices: np.ndarray) -> np.ndarray:
    """Multiply transforms left to right: compose(A, B, C) == A @ B @ C."""
    result = np.eye(4)
    for m in matrices:
        result = result @ m
    return result


@dataclass
class Primitive:
    """One drawable shape positioned inside a group."""
    kind: str
    dims: Dict[str, float]
    material: str
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))
    name: str = ""
    angular_position: Optional[float] = None   # Blades only (rad about z)

    def __post_init__(self):
        if self.kind not in PRIMITIVE_KINDS:
            raise ValueError(f"Unknown primitive kind: {self.kind}")
        self.transform = np.asarray(self.transform, dtype=float)

    @property
    def origin(self) -> np.ndarray:
        """Position of the primitive's local origin in the group frame."""
        return self.transform[:3, 3].copy()

    def transformed(self, matrix: np.ndarray) -> 'Primitive':
        """Copy of this primitive with `matrix` applied on the left."""
        return Primitive(
            kind=self.kind,
            dims=dict(self.dims),
            material=self.material,
            transform=matrix @ self.transform,
            name=self.name,
            angular_position=self.angular_position,
        )

    def congruent_to(self, other: 'Primitive', atol: float = 1e-9) -> bool:
        if self.kind != other.kind or self.material != other.material:
            return False
        if self.dims.keys() != other.dims.keys():
            return False
        for key, value in self.dims.items():
            if abs(value - other.dims[key]) > atol:
                return False
        return bool(np.allclose(self.transform, other.transform, atol=atol))

    def to_dict(self) -> dict:
        data = {
            'kind': self.kind,
            'name': self.name,
            'material': self.material,
            'dims': {k: float(v) for k, v in self.dims.items()},
            # Row-major, same argument order as three.js Matrix4.set()
            'transform': [float(v) for v in self.transform.flatten()],
        }
        if self.angular_position is not None:
            data['angular_position'] = float(self.angular_position)
        return data
