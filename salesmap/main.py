"""Command-line entrypoints for the customer sales map."""
from __future__ import annotations

import argparse
import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import structlog
from dotenv import load_dotenv

try:
    import uvloop
except ImportError:  # pragma: no cover - uvloop optional on some platforms
    uvloop = None

from salesmap.geocode.client import LookupFailure, PhotonGeocoder
from salesmap.geocode.session import create_geocode_session
from salesmap.ingest.extractor import extract
from salesmap.ingest.spreadsheet import SpreadsheetError, read_rows
from salesmap.observability.log import configure_logging
from salesmap.observability.metrics import MetricsRegistry
from salesmap.orchestrator.resolver import ingest
from salesmap.orchestrator.results import ResolutionOk
from salesmap.orchestrator.session_state import SessionState
from salesmap.render.map import render_map, write_map
from salesmap.settings import AppSettings, SettingsError, load_settings
from salesmap.storage.models import CustomerRecord
from salesmap.view.colors import assign_colors
from salesmap.view.filtering import normalise_filter

LOGGER = structlog.get_logger(__name__)

DEFAULT_SETTINGS = Path("config/settings.toml")
DEFAULT_LOGGING = Path("config/logging.yaml")


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(prog="salesmap", description="Customer sales on a map")
    parser.add_argument("--settings", default=str(DEFAULT_SETTINGS), help="Path to settings TOML")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Geocode a sales export and write an HTML map")
    render.add_argument("--input", required=True, help="OpenDocument spreadsheet (.ods)")
    render.add_argument("--output", default="map.html", help="Target HTML file")
    render.add_argument("--year", type=year_filter_arg, help="Initial year filter ('unknown' for undated rows)")
    render.add_argument("--concurrency", type=int, help="Maximum concurrent lookups")
    render.add_argument("--focus-first", action="store_true", help="Center the map on the first listed customer")
    render.add_argument("--manifest", help="Optional path for a JSON run manifest")

    extract_cmd = sub.add_parser("extract", help="Print extracted records without geocoding")
    extract_cmd.add_argument("--input", required=True, help="OpenDocument spreadsheet (.ods)")

    geocode = sub.add_parser("geocode", help="Resolve a single city name")
    geocode.add_argument("city")

    return parser


def year_filter_arg(value: str) -> str:
    """Reject a `--year` value up front so a typo fails before any lookup runs."""
    try:
        normalise_filter(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value


def load_records(path: Path, settings: AppSettings, metrics: MetricsRegistry) -> List[CustomerRecord]:
    try:
        rows = read_rows(path)
    except SpreadsheetError as exc:
        raise SystemExit(str(exc))
    return extract(rows, settings.columns, metrics=metrics)


async def run_render(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the render command end-to-end, returning the exit code."""
    metrics = MetricsRegistry()
    records = load_records(Path(args.input), settings, metrics)
    if not records:
        print("No customer rows with a city were found")
        return 1

    concurrency = args.concurrency or settings.orchestrator.max_concurrency
    session = SessionState()
    session.progress.subscribe(
        lambda progress: LOGGER.debug("progress", processed=progress.processed, total=progress.total)
    )
    async with create_geocode_session(
        user_agent=settings.geocoder.user_agent,
        timeout=settings.geocoder.timeout_seconds,
        max_connections=concurrency,
    ) as client:
        geocoder = PhotonGeocoder(client, endpoint=settings.geocoder.endpoint)
        result = await ingest(
            records,
            session=session,
            geocoder=geocoder,
            max_concurrency=concurrency,
            metrics=metrics,
        )

    if not isinstance(result, ResolutionOk):
        LOGGER.error("ingestion_failed", kind=result.kind, error=str(result.error))
        print("Loading customer locations failed; no map was written")
        return 1

    resolved = session.resolved
    colors = assign_colors(resolved)
    fmap = render_map(
        resolved,
        colors,
        settings=settings.map,
        year_filter=args.year,
        focus_first=args.focus_first,
    )
    output = write_map(fmap, Path(args.output))
    print(f"Wrote {output} ({sum(1 for r in resolved if r.has_location)}/{len(resolved)} located)")

    run_id = datetime.now().strftime("%Y%m%dT%H%M%S")
    if args.manifest:
        manifest = Path(args.manifest)
        manifest.parent.mkdir(parents=True, exist_ok=True)
        manifest.write_text(
            json.dumps({
                "run_id": run_id,
                "input": str(args.input),
                "output": str(output),
                "records": len(resolved),
                "located": sum(1 for r in resolved if r.has_location),
                "colors": colors,
                "metrics": metrics.snapshot(),
            }, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    metrics.export(path=settings.metrics_dir / f"run_{run_id}.json", run_id=run_id)
    return 0


async def run_geocode(city: str, settings: AppSettings) -> Optional[dict]:
    async with create_geocode_session(
        user_agent=settings.geocoder.user_agent,
        timeout=settings.geocoder.timeout_seconds,
        max_connections=1,
    ) as client:
        point = await PhotonGeocoder(client, endpoint=settings.geocoder.endpoint).resolve(city)
    return None if point is None else {"lat": point.lat, "lng": point.lng}


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    load_dotenv()
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings(Path(args.settings))
    except SettingsError as exc:
        raise SystemExit(str(exc))
    configure_logging(DEFAULT_LOGGING)

    if uvloop is not None:
        uvloop.install()

    if args.command == "extract":
        records = load_records(Path(args.input), settings, MetricsRegistry())
        print(json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False))
        return

    if args.command == "geocode":
        try:
            point = asyncio.run(run_geocode(args.city, settings))
        except LookupFailure as exc:
            raise SystemExit(str(exc))
        print(json.dumps(point))
        return

    if args.command == "render":
        code = asyncio.run(run_render(args, settings))
        if code:
            raise SystemExit(code)


if __name__ == "__main__":
    main()
