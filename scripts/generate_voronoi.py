#!/usr/bin/env python3
"""
Generate a seed distribution and compute its 3D Voronoi tessellation.

Writes cells.json (summary plus per-cell mesh data) to the output directory
and optionally a combined mesh file of all cells.

Usage:
    python scripts/generate_voronoi.py --distribution honeycomb --grid-size 3
    python scripts/generate_voronoi.py --distribution bcc --grid-size 5 --export-mesh stl
    python scripts/generate_voronoi.py --distribution random --seed 42 --audit --output out/
"""
import sys
import os
import json
import argparse
import logging
import time
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mesh_data import SUPPORTED_EXPORT_FORMATS, cell_to_mesh_data, export_cells
from point_distributions import DISTRIBUTIONS, generate_points
from tessellation_audit import audit_tessellation
from voronoi import VoronoiConfig, compute_voronoi_cells, summarize_cells


def main():
    parser = argparse.ArgumentParser(
        description="Compute a 3D Voronoi tessellation of a generated point set.",
    )
    parser.add_argument(
        "--distribution", default="honeycomb",
        choices=sorted(DISTRIBUTIONS.keys()),
        help="Seed distribution (default: honeycomb)",
    )
    parser.add_argument(
        "--grid-size", type=int, default=3,
        help="Distribution size parameter (default: 3)",
    )
    parser.add_argument(
        "--layer-spacing", type=float, default=1.0,
        help="Layer / lattice spacing factor (default: 1.0)",
    )
    parser.add_argument(
        "--padding", type=float, default=1.0,
        help="Bounding box padding on every side (default: 1.0)",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for stochastic distributions",
    )
    parser.add_argument(
        "--output", default="voronoi_output",
        help="Output directory (default: ./voronoi_output)",
    )
    parser.add_argument(
        "--export-mesh", default=None,
        choices=list(SUPPORTED_EXPORT_FORMATS),
        help="Also export all cells as one mesh file in this format",
    )
    parser.add_argument(
        "--audit", action="store_true",
        help="Check partition and nearest-seed properties; exit 1 on failure",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.grid_size < 1:
        parser.error(f"--grid-size must be positive, got {args.grid_size}")
    if args.padding < 0:
        parser.error(f"--padding must be non-negative, got {args.padding}")

    output_dir = os.path.abspath(args.output)
    os.makedirs(output_dir, exist_ok=True)

    point_set = generate_points(
        args.distribution,
        grid_size=args.grid_size,
        layer_spacing=args.layer_spacing,
        rng=args.seed,
    )
    print(f"Generated {len(point_set)} seeds ({args.distribution})")

    config = VoronoiConfig(padding=args.padding)
    start = time.perf_counter()
    cells = compute_voronoi_cells(point_set.points, point_set.bounding_box, config=config)
    elapsed = time.perf_counter() - start

    summary = summarize_cells(cells, point_set.bounding_box, args.padding)
    print(f"\nResult: {summary.cell_count} cells in {elapsed:.2f}s")
    print(f"  Total volume: {summary.total_volume:.4f} "
          f"(box {summary.box_volume:.4f}, coverage {summary.coverage_ratio:.4%})")
    print(f"  Faces per cell: mean {summary.mean_faces:.1f}, "
          f"min {summary.min_faces}, max {summary.max_faces}")

    result_json = {
        "distribution": args.distribution,
        "grid_size": args.grid_size,
        "padding": args.padding,
        "bounding_box": point_set.bounding_box.to_dict(),
        "summary": summary.to_dict(),
        "cells": [
            {
                "seed": c.seed.to_dict(),
                "mesh": cell_to_mesh_data(c.cell).to_dict(),
            }
            for c in cells
        ],
    }

    exit_code = 0
    if args.audit:
        report = audit_tessellation(
            cells, point_set.points, point_set.bounding_box, args.padding,
        )
        result_json["audit"] = report.to_dict()
        status = "PASSED" if report.passed else "FAILED"
        print(f"\nAudit: {status}")
        for check in report.checks:
            print(f"  {check.name}: {check.status} ({check.message})")
        for issue in report.issues[:10]:
            print(f"  - {issue}")
        if not report.passed:
            exit_code = 1

    json_path = os.path.join(output_dir, "cells.json")
    with open(json_path, "w") as f:
        json.dump(result_json, f, indent=2)
    print(f"\nCells saved to {json_path}")

    if args.export_mesh:
        mesh_path = os.path.join(output_dir, f"cells.{args.export_mesh}")
        export_cells(cells, mesh_path, file_type=args.export_mesh)
        print(f"Mesh exported to {mesh_path}")

    print("\nDone.")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
