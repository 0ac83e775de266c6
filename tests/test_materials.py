import pytest

from spoolview.geometry.materials import (
    DEFAULT_MATERIALS,
    MaterialConfigError,
    color_hex,
    get_material,
    load_materials,
)


def test_defaults_without_config() -> None:
    materials = load_materials()

    assert materials == DEFAULT_MATERIALS
    assert materials is not DEFAULT_MATERIALS


def test_yaml_overrides_fields_and_adds_keys(tmp_path) -> None:
    path = tmp_path / "materials.yaml"
    path.write_text(
        "materials:\n"
        "  fan:\n"
        "    color: '#ff0000'\n"
        "    roughness: 0.5\n"
        "    density: 4430\n"
        "  paint:\n"
        "    color: 0x00ff00\n"
    )
    materials = load_materials(str(path))

    assert materials["fan"].color == 0xFF0000
    assert materials["fan"].roughness == 0.5
    assert materials["fan"].metalness == DEFAULT_MATERIALS["fan"].metalness
    assert materials["paint"].color == 0x00FF00
    assert materials["hub"] == DEFAULT_MATERIALS["hub"]


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(MaterialConfigError):
        load_materials(str(tmp_path / "nope.yaml"))


def test_malformed_yaml_raises(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("materials: [unclosed\n")
    with pytest.raises(MaterialConfigError):
        load_materials(str(path))


def test_color_hex_and_fallback() -> None:
    assert color_hex(0x050816) == "#050816"
    assert color_hex("#ABCDEF") == "#abcdef"
    assert get_material("missing") == DEFAULT_MATERIALS["core"]
