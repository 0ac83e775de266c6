"""
SpoolView — Viewer Scene Payload

Everything the browser needs to draw the engine, as one JSON-serialisable
dict: camera, orbit controls, lights, materials, the engine root transform
and the primitives of each group. The browser builds its scene graph from
this once, then only updates the two spool angles each frame.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Tuple

from spoolview.geometry.assembly import EngineLayout, RotatingAssembly
from spoolview.geometry.materials import (
    DEFAULT_MATERIALS, FALLBACK_MATERIAL, VisualMaterial, color_hex, get_material,
)


BACKGROUND = 0x050816


@dataclass
class CameraParams:
    fov_deg: float = 45.0
    near: float = 0.1
    far: float = 200.0
    aspect: float = 2.0
    position: Tuple[float, float, float] = (7.0, 3.0, 7.5)
    target: Tuple[float, float, float] = (0.0, 0.0, 3.5)

    def resize(self, width: float, height: float) -> float:
        """Viewport resize notification; returns the new aspect ratio."""
        if width > 0 and height > 0:
            self.aspect = width / height
        return self.aspect

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class OrbitParams:
    enable_damping: bool = True
    damping_factor: float = 0.08
    enable_pan: bool = True
    enable_zoom: bool = True
    min_distance: float = 3.0
    max_distance: float = 25.0

    def to_dict(self) -> dict:
        return asdict(self)


LIGHTS = [
    {'type': 'ambient', 'color': 0xffffff, 'intensity': 0.5},
    {'type': 'directional', 'name': 'key', 'color': 0xffffff, 'intensity': 1.2,
     'position': (6.0, 9.0, 7.0)},
    {'type': 'directional', 'name': 'rim', 'color': 0x88aaff, 'intensity': 0.9,
     'position': (-6.0, 3.0, -7.0)},
]


def _lights_payload():
    out = []
    for light in LIGHTS:
        entry = dict(light)
        entry['color'] = color_hex(light['color'])
        if 'position' in entry:
            entry['position'] = list(entry['position'])
        out.append(entry)
    return out


def _group_payload(asm: RotatingAssembly, known_materials) -> dict:
    prims = []
    for p in asm.primitives:
        d = p.to_dict()
        if d['material'] not in known_materials:
            d['material'] = FALLBACK_MATERIAL
        prims.append(d)
    return {
        'name': asm.name,
        'spool': asm.spool,
        'offset_z': asm.offset_z,
        'angle': asm.angle,
        'primitives': prims,
    }


def build_scene_payload(layout: EngineLayout,
                        materials: Optional[Dict[str, VisualMaterial]] = None,
                        camera: Optional[CameraParams] = None,
                        orbit: Optional[OrbitParams] = None) -> dict:
    materials = dict(materials if materials is not None else DEFAULT_MATERIALS)
    # Unknown material keys are drawn with the fallback, so it must be sent
    materials.setdefault(FALLBACK_MATERIAL, get_material(FALLBACK_MATERIAL, materials))
    camera = camera if camera is not None else CameraParams()
    orbit = orbit if orbit is not None else OrbitParams()

    static = []
    for p in layout.static:
        d = p.to_dict()
        if d['material'] not in materials:
            d['material'] = FALLBACK_MATERIAL
        static.append(d)

    return {
        'background': color_hex(BACKGROUND),
        'camera': camera.to_dict(),
        'orbit': orbit.to_dict(),
        'lights': _lights_payload(),
        'materials': {key: mat.to_dict() for key, mat in materials.items()},
        'root_transform': [float(v) for v in layout.root_transform().flatten()],
        'groups': {
            'spool_1': _group_payload(layout.spool_1, materials),
            'spool_2': _group_payload(layout.spool_2, materials),
        },
        'static': static,
    }
