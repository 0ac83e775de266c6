import os

import pytest

from spoolview.export.stl_export import (
    assembly_mesh,
    export_engine,
    primitive_to_mesh,
)
from spoolview.geometry.assembly import assemble_engine
from spoolview.geometry.primitives import Primitive, translation
from spoolview.geometry.stage import radial_blade


def test_blade_mesh_spans_root_to_tip() -> None:
    mesh = primitive_to_mesh(radial_blade(0.4, 1.0, 0.05))

    assert list(mesh.extents) == pytest.approx([0.05, 0.95, 0.025])
    assert mesh.bounds[0][1] == pytest.approx(0.4)
    assert mesh.bounds[1][1] == pytest.approx(1.35)


def test_cylinder_mesh_is_closed_and_centred() -> None:
    prim = Primitive(kind="cylinder", dims={"radius": 0.5, "length": 2.0, "segments": 24},
                     material="core", transform=translation(0.0, 0.0, 3.0))
    mesh = primitive_to_mesh(prim)

    assert mesh.is_watertight
    assert mesh.bounds[0][2] == pytest.approx(2.0)
    assert mesh.bounds[1][2] == pytest.approx(4.0)


def test_shell_mesh_is_open() -> None:
    prim = Primitive(kind="shell", dims={"radius": 1.9, "length": 8.0, "segments": 64},
                     material="nacelle")
    mesh = primitive_to_mesh(prim)

    assert not mesh.is_watertight
    assert mesh.extents[2] == pytest.approx(8.0)


def test_cone_mesh_is_centred_on_origin() -> None:
    prim = Primitive(kind="cone", dims={"radius": 0.62, "length": 1.8, "segments": 32},
                     material="core")
    mesh = primitive_to_mesh(prim)

    assert mesh.bounds[0][2] == pytest.approx(-0.9)
    assert mesh.bounds[1][2] == pytest.approx(0.9)


def test_crossed_combustor_tori_differ_in_orientation() -> None:
    layout = assemble_engine()
    comb_a, comb_b = layout.static[0], layout.static[1]
    mesh_a = primitive_to_mesh(comb_a)
    mesh_b = primitive_to_mesh(comb_b)

    assert mesh_a.extents[2] > mesh_b.extents[2]


def test_assembly_mesh_follows_spool_offset() -> None:
    layout = assemble_engine()
    mesh = assembly_mesh(layout.spool_2)

    # Core drum front face (3.3 - 2.3 / 2), shifted by the 0.4 group offset
    assert mesh.bounds[0][2] == pytest.approx(3.3 - 1.15 + 0.4, abs=1e-6)


def test_export_engine_writes_all_files(tmp_path) -> None:
    exported = export_engine(assemble_engine(), output_dir=str(tmp_path), verbose=False)

    assert set(exported) == {"spool_1", "spool_2", "static", "assembly"}
    for path in exported.values():
        assert os.path.exists(path)
        assert os.path.getsize(path) > 0
