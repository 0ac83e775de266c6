"""
SpoolView — STL Export Module

Turns the engine layout's primitives into triangle meshes (trimesh) and
writes one STL per spool, one for the static structure and one for the
whole engine, all in the engine frame (axis +z, fan at the origin).
"""

import logging
import os
from typing import Dict, List

import numpy as np
import trimesh

from spoolview.geometry.assembly import EngineLayout, RotatingAssembly
from spoolview.geometry.primitives import Primitive, translation

logger = logging.getLogger(__name__)


def _revolve_profile(z_coords: np.ndarray, r_coords: np.ndarray,
                     n_theta: int = 72) -> trimesh.Trimesh:
    """
    Surface of revolution of a 2D profile (z, r) about the Z axis.
    Open at both ends.
    """
    n_pts = len(z_coords)
    theta = np.linspace(0, 2 * np.pi, n_theta + 1)[:-1]

    vertices = np.array([
        [r_coords[i] * np.cos(t), r_coords[i] * np.sin(t), z_coords[i]]
        for i in range(n_pts) for t in theta
    ])

    faces = []
    for i in range(n_pts - 1):
        for j in range(n_theta):
            j_next = (j + 1) % n_theta
            v00 = i * n_theta + j
            v01 = i * n_theta + j_next
            v10 = (i + 1) * n_theta + j
            v11 = (i + 1) * n_theta + j_next
            faces.append([v00, v01, v10])
            faces.append([v01, v11, v10])

    return trimesh.Trimesh(vertices=vertices, faces=np.array(faces), process=False)


def _create_disc(z_pos: float, radius: float, n_theta: int, facing: float) -> trimesh.Trimesh:
    """Flat fan-triangulated disc; facing=+1 points the normal along +z."""
    theta = np.linspace(0, 2 * np.pi, n_theta + 1)[:-1]
    verts = [[0.0, 0.0, z_pos]]
    verts.extend([radius * np.cos(t), radius * np.sin(t), z_pos] for t in theta)

    faces = []
    for j in range(n_theta):
        j_next = (j + 1) % n_theta
        if facing > 0:
            faces.append([0, j + 1, j_next + 1])
        else:
            faces.append([0, j_next + 1, j + 1])
    return trimesh.Trimesh(vertices=np.array(verts), faces=np.array(faces), process=False)


def _create_cylinder(z_start: float, z_end: float, radius: float,
                     n_theta: int = 72) -> trimesh.Trimesh:
    """Capped cylinder along the Z axis."""
    shell = _revolve_profile(np.array([z_start, z_end]), np.array([radius, radius]), n_theta)
    caps = [_create_disc(z_start, radius, n_theta, -1.0),
            _create_disc(z_end, radius, n_theta, 1.0)]
    mesh = trimesh.util.concatenate([shell] + caps)
    mesh.merge_vertices()
    return mesh


def _local_mesh(primitive: Primitive) -> trimesh.Trimesh:
    """Mesh of the primitive in its own local frame."""
    d = primitive.dims
    kind = primitive.kind
    segments = int(d.get('segments', 32))

    if kind == 'box':
        return trimesh.creation.box(extents=[d['x'], d['y'], d['z']])

    if kind == 'cylinder':
        half = d['length'] / 2.0
        return _create_cylinder(-half, half, d['radius'], segments)

    if kind == 'shell':
        half = d['length'] / 2.0
        return _revolve_profile(np.array([-half, half]),
                                np.array([d['radius'], d['radius']]), segments)

    if kind == 'cone':
        # trimesh puts the base at z=0; centre it so the apex is at +length/2
        mesh = trimesh.creation.cone(radius=d['radius'], height=d['length'], sections=segments)
        mesh.apply_transform(translation(0.0, 0.0, -d['length'] / 2.0))
        return mesh

    if kind == 'torus':
        return trimesh.creation.torus(
            major_radius=d['radius'],
            minor_radius=d['tube_radius'],
            major_sections=int(d.get('tubular_segments', 64)),
            minor_sections=int(d.get('radial_segments', 16)),
        )

    raise ValueError(f"Unsupported primitive kind: {kind}")


def primitive_to_mesh(primitive: Primitive, parent: np.ndarray = None) -> trimesh.Trimesh:
    """Mesh of the primitive in its group frame (or in `parent` @ group frame)."""
    mesh = _local_mesh(primitive)
    matrix = primitive.transform if parent is None else parent @ primitive.transform
    mesh.apply_transform(matrix)
    return mesh


def assembly_mesh(assembly: RotatingAssembly, include_rotation: bool = True) -> trimesh.Trimesh:
    """All of one spool's primitives, in the engine frame."""
    if include_rotation:
        parent = assembly.world_transform()
    else:
        parent = translation(0.0, 0.0, assembly.offset_z)
    return trimesh.util.concatenate([primitive_to_mesh(p, parent) for p in assembly.primitives])


def static_mesh(layout: EngineLayout) -> trimesh.Trimesh:
    return trimesh.util.concatenate([primitive_to_mesh(p) for p in layout.static])


def export_engine(layout: EngineLayout,
                  output_dir: str = "exports/stl",
                  verbose: bool = True) -> Dict[str, str]:
    """
    Export spool_1.stl, spool_2.stl, static.stl and engine_assembly.stl.
    Returns {name: filepath}.
    """
    os.makedirs(output_dir, exist_ok=True)

    if verbose:
        print(f"\n  SpoolView STL Export")
        print(f"  Output: {os.path.abspath(output_dir)}\n")

    parts = [
        ('spool_1', lambda: assembly_mesh(layout.spool_1)),
        ('spool_2', lambda: assembly_mesh(layout.spool_2)),
        ('static', lambda: static_mesh(layout)),
    ]

    exported = {}
    meshes: List[trimesh.Trimesh] = []
    for name, build in parts:
        if verbose:
            print(f"  Exporting {name}...", end=" ")
        mesh = build()
        path = os.path.join(output_dir, f"{name}.stl")
        mesh.export(path)
        exported[name] = path
        meshes.append(mesh)
        logger.debug("Wrote %s (%d faces)", path, len(mesh.faces))
        if verbose:
            print(f"✓ {len(mesh.vertices)} verts")

    assembly = trimesh.util.concatenate(meshes)
    path = os.path.join(output_dir, "engine_assembly.stl")
    assembly.export(path)
    exported['assembly'] = path

    if verbose:
        file_size = os.path.getsize(path) / 1024
        print(f"\n  Assembly: {len(assembly.vertices):,} vertices, {len(assembly.faces):,} faces")
        print(f"  File size: {file_size:.0f} KB")
        print(f"\n  Files exported:")
        for name, fpath in exported.items():
            size = os.path.getsize(fpath) / 1024
            print(f"    {name:16s} → {fpath} ({size:.0f} KB)")

    return exported


if __name__ == "__main__":
    from spoolview.geometry.assembly import assemble_engine
    export_engine(assemble_engine())
