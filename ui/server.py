"""
SpoolView — 3D Viewer Web Server

Flask backend for the Three.js engine viewer. The browser fetches the
scene once, then polls /api/state every animation frame; each poll
advances the spool dynamics by the wall-clock time since the previous
one and returns the new spool angles and N1 / N2 readouts.

Throttle writes and simulation-feed overrides take the same lock as the
frame tick, so an override always lands whole between two ticks.
"""

import os
import sys
import threading
from flask import Flask, render_template, send_from_directory, jsonify, request
from flask_cors import CORS

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from spoolview.geometry.assembly import assemble_engine
from spoolview.geometry.materials import load_materials
from spoolview.physics.simulation import EngineAnimator, FrameClock
from spoolview.viewer.scene import build_scene_payload

app = Flask(__name__,
            static_folder='static',
            template_folder='templates')
CORS(app)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
STL_DIR = os.path.join(PROJECT_ROOT, 'exports', 'stl')
MATERIALS_YAML = os.path.join(PROJECT_ROOT, 'config', 'materials.yaml')

ENGINE_LOCK = threading.Lock()
ENGINE = {
    'animator': None,
    'clock': None,
    'materials': None,
}


def _clamp(value, default, low, high):
    try:
        v = float(value)
    except (TypeError, ValueError):
        v = float(default)
    return max(low, min(high, v))


def reset_engine(materials_path=None, now=None):
    """(Re)build the engine, dynamics and frame clock. Returns the animator."""
    if materials_path is not None:
        materials = load_materials(materials_path)
    else:
        materials = _default_materials()
    with ENGINE_LOCK:
        _install_engine(materials, now)
        return ENGINE['animator']


def _default_materials():
    # Only the bundled file is optional; an explicit path must exist
    return load_materials(MATERIALS_YAML if os.path.exists(MATERIALS_YAML) else None)


def _install_engine(materials, now=None):
    # Caller holds ENGINE_LOCK
    ENGINE['animator'] = EngineAnimator(assemble_engine())
    ENGINE['clock'] = FrameClock(now=now) if now is not None else FrameClock()
    ENGINE['materials'] = materials


def _engine():
    """The shared animator, built on first use if run_server() did not."""
    with ENGINE_LOCK:
        if ENGINE['animator'] is None:
            _install_engine(_default_materials())
        return ENGINE['animator']


def _json_body():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None
    return payload


@app.route('/')
def index():
    return render_template('index.html')


@app.route('/api/scene')
def get_scene():
    animator = _engine()
    with ENGINE_LOCK:
        payload = build_scene_payload(animator.layout, ENGINE['materials'])
    return jsonify(payload)


@app.route('/api/state')
def get_state():
    """Advance one frame by wall-clock dt and return telemetry."""
    animator = _engine()
    with ENGINE_LOCK:
        dt = ENGINE['clock'].tick()
        frame = animator.tick(dt)
    return jsonify(frame.to_dict())


@app.route('/api/throttle', methods=['POST'])
def set_throttle():
    payload = _json_body()
    if payload is None:
        return jsonify({'error': 'Expected a JSON object body'}), 400

    animator = _engine()
    with ENGINE_LOCK:
        if 'slider' in payload:
            animator.set_slider(_clamp(payload.get('slider'), 0.0, 0.0, 100.0))
        elif 'throttle' in payload:
            animator.set_throttle(_clamp(payload.get('throttle'), 0.0, 0.0, 1.0))
        else:
            return jsonify({'error': "Provide 'slider' (0-100) or 'throttle' (0-1)"}), 400
        frame = animator.snapshot()

    return jsonify({
        'throttle': frame.throttle,
        'slider': frame.slider,
    })


@app.route('/api/sim', methods=['POST'])
def apply_sim_update():
    """External simulation feed: partial {throttle?, n1?, n2?} override."""
    payload = _json_body()
    if payload is None:
        return jsonify({'error': 'Expected a JSON object body'}), 400

    animator = _engine()
    with ENGINE_LOCK:
        applied = animator.apply_sim_update(payload)
        frame = animator.snapshot()

    return jsonify({
        'applied': applied,
        'state': frame.to_dict(),
    })


@app.route('/stl/<filename>')
def serve_stl(filename):
    """Serve exported STL files."""
    if not os.path.exists(os.path.join(STL_DIR, filename)):
        return jsonify({'error': 'File not found'}), 404
    return send_from_directory(STL_DIR, filename)


def run_server(host='127.0.0.1', port=5000, debug=False, materials_path=None):
    reset_engine(materials_path)
    print("\n  SpoolView 3D Viewer")
    print(f"  STL directory: {STL_DIR}")
    stl_count = len([f for f in os.listdir(STL_DIR) if f.endswith('.stl')]) if os.path.exists(STL_DIR) else 0
    print(f"  Found {stl_count} STL files")
    print(f"\n  Open: http://{host}:{port}\n")
    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_server(host='0.0.0.0', debug=True)
