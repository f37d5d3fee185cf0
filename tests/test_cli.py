from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "generate_voronoi.py"


def test_cli_writes_cells_json(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--distribution", "honeycomb",
        "--grid-size", "2",
        "--output", str(tmp_path),
        "--audit",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert "Audit: PASSED" in proc.stdout

    result = json.loads((tmp_path / "cells.json").read_text())
    assert result["summary"]["cell_count"] == 8
    assert len(result["cells"]) == 8
    assert result["audit"]["passed"] is True


def test_cli_exports_mesh(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--distribution", "simple_cubic",
        "--grid-size", "3",
        "--output", str(tmp_path),
        "--export-mesh", "stl",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert (tmp_path / "cells.stl").is_file()


def test_cli_accepts_zero_padding(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--distribution", "simple_cubic",
        "--grid-size", "3",
        "--padding", "0",
        "--output", str(tmp_path),
        "--audit",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr

    result = json.loads((tmp_path / "cells.json").read_text())
    assert result["padding"] == 0
    assert result["summary"]["cell_count"] == len(result["cells"])
    assert result["audit"]["passed"] is True


def test_cli_rejects_negative_padding(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--padding", "-1",
        "--output", str(tmp_path),
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode != 0
    assert "non-negative" in proc.stderr


def test_cli_rejects_unknown_distribution(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--distribution", "not_a_distribution",
        "--output", str(tmp_path),
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode != 0
