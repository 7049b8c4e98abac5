#!/usr/bin/env python3
"""Transform a CSV of points between two registered coordinate systems.

    python scripts/transform_points.py --source 25832 --target 3857 --input pts.csv

Input rows are ``x,y`` or ``x,y,z`` (a header row is skipped when it is not
numeric). Output goes to --output or stdout in the same layout.
"""
from __future__ import annotations

import argparse
import csv
import logging
import os
import sys
from typing import List, Optional, TextIO

# Make the repository root importable
THIS_DIR = os.path.dirname(__file__)
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from app.crs.errors import CrsError  # noqa: E402
from app.registry import CoordinateSystemRegistry  # noqa: E402
from app.settings import load_settings  # noqa: E402


def read_points(fh: TextIO) -> List[List[float]]:
    points: List[List[float]] = []
    for row in csv.reader(fh):
        if not row or not "".join(row).strip():
            continue
        try:
            values = [float(v) for v in row]
        except ValueError:
            if not points:
                continue  # header
            raise
        if len(values) not in (2, 3):
            raise ValueError(f"Expected 2 or 3 columns, got {len(values)}: {row}")
        points.append(values)
    return points


def write_points(fh: TextIO, points) -> None:
    w = csv.writer(fh)
    for p in points:
        w.writerow([repr(float(v)) for v in p])


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Transform CSV points between two coordinate systems.")
    ap.add_argument("--source", type=int, required=True, help="Source srid")
    ap.add_argument("--target", type=int, required=True, help="Target srid")
    ap.add_argument("--input", required=True, help="CSV with x,y[,z] rows ('-' for stdin)")
    ap.add_argument("--output", help="Optional path to write the transformed CSV")
    ap.add_argument("--catalog", help="Optional 'srid;wkt' catalog (defaults to CRS_CATALOG_PATH)")
    args = ap.parse_args(argv)

    settings = load_settings()
    # stdout carries the CSV, so log lines go to stderr
    logging.basicConfig(level=settings.log_level, stream=sys.stderr)
    registry = CoordinateSystemRegistry(
        catalog_path=args.catalog or settings.catalog_path,
        datum_grids=settings.datum_grids,
        timeout=settings.registry_timeout,
    )

    if args.input == "-":
        points = read_points(sys.stdin)
    else:
        with open(args.input, newline="") as f:
            points = read_points(f)

    try:
        pipeline = registry.create_transformation(args.source, args.target)
    except CrsError as e:
        print(f"Cannot transform {args.source} -> {args.target}: {e}", file=sys.stderr)
        return 2
    out = pipeline.transform_many(points)

    if args.output:
        with open(args.output, "w", newline="") as f:
            write_points(f, out)
        print(f"Wrote {len(out)} points to {args.output}", file=sys.stderr)
    else:
        write_points(sys.stdout, out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
