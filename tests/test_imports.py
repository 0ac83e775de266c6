import importlib

import pytest


@pytest.mark.parametrize("module", [
    "spoolview.logging_config",
    "spoolview.geometry.primitives",
    "spoolview.geometry.stage",
    "spoolview.geometry.assembly",
    "spoolview.geometry.materials",
    "spoolview.physics.spool_dynamics",
    "spoolview.physics.simulation",
    "spoolview.viewer.scene",
    "spoolview.export.stl_export",
    "ui.server",
    "app",
])
def test_module_imports(module) -> None:
    assert importlib.import_module(module) is not None


def test_setup_logging_returns_package_logger(tmp_path) -> None:
    from spoolview.logging_config import setup_logging

    logger = setup_logging(log_file=str(tmp_path / "spoolview.log"))
    assert logger.name == "spoolview"
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert (tmp_path / "spoolview.log").read_text().strip().endswith("hello")
