import pytest

from spoolview.geometry.materials import MaterialConfigError
from ui import server


@pytest.fixture
def clock():
    return {"t": 0.0}


@pytest.fixture
def client(clock):
    server.reset_engine(now=lambda: clock["t"])
    server.app.config["TESTING"] = True
    with server.app.test_client() as c:
        yield c


def test_index_page(client) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"N1" in resp.data


def test_scene_endpoint(client) -> None:
    data = client.get("/api/scene").get_json()

    assert set(data["groups"]) == {"spool_1", "spool_2"}
    assert data["camera"]["fov_deg"] == 45.0
    # materials.yaml override
    assert data["materials"]["nacelle"]["opacity"] == pytest.approx(0.16)


def test_throttle_accepts_slider_and_clamps(client) -> None:
    resp = client.post("/api/throttle", json={"slider": 150})
    assert resp.status_code == 200
    assert resp.get_json() == {"throttle": 1.0, "slider": 100}

    resp = client.post("/api/throttle", json={"throttle": 0.25})
    assert resp.get_json()["slider"] == 25


@pytest.mark.parametrize("body", [None, [1, 2], {"nothing": 1}])
def test_throttle_rejects_bad_bodies(client, body) -> None:
    if body is None:
        resp = client.post("/api/throttle", data="not json", content_type="text/plain")
    else:
        resp = client.post("/api/throttle", json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_state_advances_by_wall_clock(client, clock) -> None:
    client.post("/api/throttle", json={"throttle": 1.0})
    clock["t"] += 100.0
    state = client.get("/api/state").get_json()

    assert state["dt"] == pytest.approx(100.0)
    assert state["n1_pct"] == pytest.approx(100.0)
    assert state["n1_text"] == "100.0"
    assert state["n2_text"] == "100.0"

    # Same instant again: floored dt, no jump
    state = client.get("/api/state").get_json()
    assert state["dt"] == pytest.approx(0.001)


def test_sim_override_is_partial(client) -> None:
    resp = client.post("/api/sim", json={"n1": 5, "n2": "fast"})
    data = resp.get_json()

    assert resp.status_code == 200
    assert data["applied"] == ["n1"]
    assert data["state"]["n1_pct"] == pytest.approx(5.0)
    assert data["state"]["n2_pct"] == pytest.approx(0.0)


def test_sim_rejects_non_object(client) -> None:
    assert client.post("/api/sim", json=[1]).status_code == 400


def test_missing_stl_is_404(client) -> None:
    resp = client.get("/stl/does_not_exist.stl")
    assert resp.status_code == 404


def test_explicit_missing_materials_file_raises(tmp_path) -> None:
    with pytest.raises(MaterialConfigError):
        server.reset_engine(materials_path=str(tmp_path / "nope.yaml"))


def test_explicit_materials_file_is_used(tmp_path) -> None:
    path = tmp_path / "materials.yaml"
    path.write_text("materials:\n  nacelle:\n    opacity: 0.5\n")
    server.reset_engine(materials_path=str(path))
    with server.app.test_client() as c:
        data = c.get("/api/scene").get_json()

    assert data["materials"]["nacelle"]["opacity"] == pytest.approx(0.5)


def test_cold_start_builds_engine_once() -> None:
    server.ENGINE["animator"] = None
    first = server._engine()

    assert first is not None
    assert server._engine() is first
