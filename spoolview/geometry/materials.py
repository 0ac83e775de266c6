"""
SpoolView — Visual Material Table

Surface appearance for every part of the engine (PBR metalness/roughness
model, as consumed by three.js MeshStandardMaterial). Defaults match the
reference look; config/materials.yaml may override any field.
"""

import yaml
from dataclasses import dataclass, fields, replace
from typing import Dict, Optional


class MaterialConfigError(Exception):
    """Raised when a materials config file cannot be read or parsed."""


@dataclass(frozen=True)
class VisualMaterial:
    """Appearance of one engine part."""
    name: str = ""
    color: int = 0x777777
    metalness: float = 0.7
    roughness: float = 0.4
    emissive: Optional[int] = None
    emissive_intensity: float = 0.0
    transparent: bool = False
    opacity: float = 1.0

    def to_dict(self) -> dict:
        data = {
            'name': self.name,
            'color': color_hex(self.color),
            'metalness': self.metalness,
            'roughness': self.roughness,
            'transparent': self.transparent,
            'opacity': self.opacity,
        }
        if self.emissive is not None:
            data['emissive'] = color_hex(self.emissive)
            data['emissive_intensity'] = self.emissive_intensity
        return data


FALLBACK_MATERIAL = 'core'

DEFAULT_MATERIALS = {
    'fan': VisualMaterial(name="Fan blade", color=0x111111, metalness=0.9, roughness=0.2),
    'fan_le': VisualMaterial(name="Booster blade", color=0xcad2ff, metalness=0.9, roughness=0.3),
    'hub': VisualMaterial(name="Fan hub", color=0xe5e7eb, metalness=0.85, roughness=0.35),
    'core': VisualMaterial(name="Core", color=0x777777, metalness=0.7, roughness=0.4),
    'hpt': VisualMaterial(name="HP turbine", color=0x9e7c4b, metalness=0.75, roughness=0.4),
    'lpt': VisualMaterial(name="LP turbine", color=0x6e6e6e, metalness=0.65, roughness=0.45),
    'combustor': VisualMaterial(
        name="Combustor", color=0xffa500, metalness=0.6, roughness=0.5,
        emissive=0xff6600, emissive_intensity=0.7,
    ),
    'nacelle': VisualMaterial(
        name="Nacelle", color=0xf9fafb, metalness=0.3, roughness=0.2,
        transparent=True, opacity=0.16,
    ),
    'shaft': VisualMaterial(name="Shaft", color=0x444444, metalness=0.8, roughness=0.35),
    'booster_drum': VisualMaterial(name="Booster drum", color=0x8faadc, metalness=0.75, roughness=0.35),
    'hpc_drum': VisualMaterial(name="HPC drum", color=0x5a6d7c, metalness=0.75, roughness=0.35),
}


def color_hex(value) -> str:
    """0xRRGGBB int (or '#rrggbb' string) -> '#rrggbb'."""
    if isinstance(value, str):
        value = int(value.lstrip('#'), 16)
    return f"#{int(value) & 0xFFFFFF:06x}"


def _coerce_color(value) -> int:
    if isinstance(value, str):
        return int(value.lstrip('#').replace('0x', ''), 16)
    return int(value)


def load_materials(config_path: Optional[str] = None) -> Dict[str, VisualMaterial]:
    """
    Load materials: defaults overlaid with the `materials:` mapping of a
    YAML file. Unknown fields are ignored; new keys add new materials.
    """
    materials = dict(DEFAULT_MATERIALS)
    if not config_path:
        return materials

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise MaterialConfigError(f"Cannot read materials file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise MaterialConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise MaterialConfigError(f"{config_path}: top level must be a mapping")

    known = {f.name for f in fields(VisualMaterial)}
    for key, props in (data.get('materials') or {}).items():
        base = materials.get(key, VisualMaterial(name=key))
        updates = {k: v for k, v in (props or {}).items() if k in known}
        for color_field in ('color', 'emissive'):
            if updates.get(color_field) is not None:
                updates[color_field] = _coerce_color(updates[color_field])
        materials[key] = replace(base, **updates)
    return materials


def get_material(key: str, materials: Optional[Dict[str, VisualMaterial]] = None) -> VisualMaterial:
    if materials is None:
        materials = DEFAULT_MATERIALS
    return materials.get(key, materials.get(FALLBACK_MATERIAL, DEFAULT_MATERIALS[FALLBACK_MATERIAL]))


if __name__ == "__main__":
    print("=== SpoolView Material Table ===\n")
    for key, mat in load_materials().items():
        extra = f"  emissive {color_hex(mat.emissive)}" if mat.emissive is not None else ""
        alpha = f"  opacity {mat.opacity}" if mat.transparent else ""
        print(f"  {key:13s} {color_hex(mat.color)}  metal {mat.metalness:.2f}  "
              f"rough {mat.roughness:.2f}{extra}{alpha}")
