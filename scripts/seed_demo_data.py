#!/usr/bin/env python3
"""Upload a synthetic precinct dataset into a running Turnout Vision backend.

Usage:
    # Start the backend first:
    uvicorn turnout_vision.web.app:create_app --factory --port 8080

    # Seed demo data:
    python3 scripts/seed_demo_data.py

    # Write the generated CSV without uploading:
    python3 scripts/seed_demo_data.py --write demo_precincts.csv --no-upload

The generated CSV is uploaded through the public API, so it passes through
the same parsing, validation and filter inference as a user upload. The
script prints the session id, which the dashboard page can be pointed at.

Data created:
    - A grid of square precincts around lower Manhattan
    - ``region`` and ``ward`` columns that become filters
    - A per-row ``polling_place`` column that is never offered as a filter
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from datetime import datetime, timezone

import httpx

DEFAULT_BASE_URL = "http://localhost:8080"

REGIONS = ["North", "South", "East", "West"]
ORIGIN_LNG = -74.02
ORIGIN_LAT = 40.70
CELL = 0.01


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def api(
    client: httpx.Client,
    method: str,
    path: str,
    *,
    json: dict | None = None,
) -> dict | list | None:
    """Make an API call and return parsed JSON, or None on failure."""
    resp = client.request(method, path, json=json)
    if resp.status_code >= 400:
        print(f"  FAILED {method} {path} -> {resp.status_code}: {resp.text[:200]}")
        return None
    if resp.headers.get("content-type", "").startswith("application/json"):
        return resp.json()
    return None


def section(title: str) -> None:
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}")


# ---------------------------------------------------------------------------
# Dataset generation
# ---------------------------------------------------------------------------


def precinct_boundary(col: int, row: int) -> dict:
    lng = ORIGIN_LNG + col * CELL
    lat = ORIGIN_LAT + row * CELL
    ring = [
        [lng, lat],
        [lng + CELL, lat],
        [lng + CELL, lat + CELL],
        [lng, lat + CELL],
        [lng, lat],
    ]
    return {
        "type": "Feature",
        "properties": {"grid": f"{col}:{row}"},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


def generate_csv(columns: int, rows: int, seed: int) -> str:
    """Build CSV text for a columns x rows grid of precincts."""
    rng = random.Random(seed)
    lines = ["precinct_id,total_registered_voters,votes_cast,geojson_boundary,region,ward,polling_place"]
    number = 0
    for row in range(rows):
        for col in range(columns):
            number += 1
            region = REGIONS[(col * 2 // columns) + 2 * (row * 2 // rows)]
            ward = f"Ward {1 + (col + row) % 3}"
            registered = rng.randint(400, 2500)
            # Each region centres on a different turnout level.
            centre = 0.35 + 0.12 * REGIONS.index(region)
            turnout = min(max(rng.gauss(centre, 0.08), 0.05), 0.98)
            votes = int(registered * turnout)
            boundary = json.dumps(precinct_boundary(col, row)).replace('"', '""')
            lines.append(
                f'P{number:03d},{registered},{votes},"{boundary}",{region},{ward},School {number}'
            )
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


def seed_dataset(client: httpx.Client, csv_text: str, filename: str) -> str | None:
    section("Uploading dataset")
    session = api(client, "POST", "/api/sessions")
    if not session:
        return None
    session_id = session["session_id"]
    summary = api(
        client,
        "POST",
        f"/api/sessions/{session_id}/dataset",
        json={"filename": filename, "csv_text": csv_text},
    )
    if not summary:
        return None
    print(f"  Session:          {session_id}")
    print(f"  Precincts:        {summary['record_count']}")
    for column, options in summary["catalog"].items():
        print(f"  Filter {column + ':':<10} {', '.join(options)}")
    return session_id


def show_views(client: httpx.Client, session_id: str) -> None:
    section("Views")
    bins = api(client, "GET", f"/api/sessions/{session_id}/histogram") or []
    for b in bins:
        print(f"  {b['name']:>9}  {'#' * b['count']}")

    extremes = api(client, "GET", f"/api/sessions/{session_id}/extremes") or []
    for entry in extremes:
        print(f"  {entry['group']:<9} {entry['precinct_id']}  {entry['turnout_percent']:.1f}%")


def request_insights(client: httpx.Client, session_id: str) -> None:
    section("Insights")
    result = api(client, "POST", f"/api/sessions/{session_id}/insights")
    if result:
        print(result.get("insights") or "  (empty)")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Seed a demo precinct dataset into a running Turnout Vision backend"
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Backend base URL (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument("--columns", type=int, default=6, help="Grid width in precincts")
    parser.add_argument("--rows", type=int, default=5, help="Grid height in precincts")
    parser.add_argument("--seed", type=int, default=2024, help="Random seed")
    parser.add_argument("--write", metavar="PATH", help="Also write the CSV to PATH")
    parser.add_argument(
        "--no-upload", action="store_true", help="Only generate the CSV"
    )
    parser.add_argument(
        "--insights",
        action="store_true",
        help="Request LLM insights after uploading (needs a running provider)",
    )
    args = parser.parse_args()

    csv_text = generate_csv(args.columns, args.rows, args.seed)
    if args.write:
        with open(args.write, "w", encoding="utf-8") as f:
            f.write(csv_text)
        print(f"Wrote {args.columns * args.rows} precincts to {args.write}")
    if args.no_upload:
        return

    print("Turnout Vision Demo Data Seeder")
    print(f"Target: {args.base_url}")
    print(f"Time:   {datetime.now(timezone.utc).isoformat()}")

    with httpx.Client(base_url=args.base_url, timeout=120.0) as client:
        try:
            health = api(client, "GET", "/api/health")
        except httpx.ConnectError:
            health = None
        if not health:
            print(f"\nERROR: Cannot reach {args.base_url}. Start the backend first:")
            print("  uvicorn turnout_vision.web.app:create_app --factory --port 8080")
            sys.exit(1)

        print(f"Backend: {health.get('status', 'unknown')} (v{health.get('version', '?')})")

        session_id = seed_dataset(client, csv_text, "demo_precincts.csv")
        if session_id is None:
            sys.exit(1)
        show_views(client, session_id)
        if args.insights:
            request_insights(client, session_id)

        section("Done")
        print(f"  Session id: {session_id}")
        print(f"  Dashboard:  {args.base_url}/?session={session_id}")
        print()


if __name__ == "__main__":
    main()
