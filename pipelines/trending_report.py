"""Batch trending report from a JSON file of companies."""
# ruff: noqa: UP017

from __future__ import annotations

import argparse
import hashlib
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from app.models.trending import TrendingSnapshot
from app.services.trending.engine import TrendingContext, TrendingEngine
from app.services.trending.errors import TrendingError
from app.services.trending.factors import (
    DEFAULT_LIMIT,
    get_top_trending,
    get_trending_by_category,
    get_trending_sectors,
    summarize_trending,
)
from app.services.trending.repositories import InMemoryCompanyRepository, InMemoryScoreHistory, load_companies

logger = logging.getLogger("pipelines.trending_report")

OUTPUT_SCHEMA_VERSION = 1
DEFAULT_INPUT = Path("fixtures/trending/companies.json")
DEFAULT_OUTPUT = Path("output/trending_report.json")


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse CLI arguments for the trending report."""
    parser = argparse.ArgumentParser(
        description="Score companies by trending factors and write a ranked report.",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=DEFAULT_INPUT,
        help="JSON array of company payloads (optionally with investors/lead_investor).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help="Destination for the trending report JSON.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help="Number of companies kept in the top list.",
    )
    parser.add_argument(
        "--category",
        default=None,
        help="Optional category substring; adds a filtered list to the report.",
    )
    return parser.parse_args(argv)


def run_pipeline(
    input_path: Path,
    output_path: Path,
    *,
    limit: int = DEFAULT_LIMIT,
    category: str | None = None,
    now: datetime | None = None,
) -> TrendingSnapshot:
    """Score the input population and persist the report."""
    start = datetime.now(timezone.utc)
    companies = load_companies(input_path)
    engine = TrendingEngine(
        repository=InMemoryCompanyRepository(companies),
        history=InMemoryScoreHistory(),
        context=TrendingContext(simulate_history=True, default_limit=limit),
    )
    snapshot = engine.compute_snapshot(now=now)
    logger.info(
        "Trending report start. input=%s companies=%s",
        input_path,
        snapshot.total_companies,
    )
    payload = _build_output_payload(snapshot, limit=limit, category=category)
    sha = _persist_output(payload, output_path)
    _log_summary(snapshot, start=start, output_path=output_path, sha=sha)
    return snapshot


def _build_output_payload(
    snapshot: TrendingSnapshot,
    *,
    limit: int,
    category: str | None,
) -> dict[str, object]:
    payload: dict[str, object] = {
        "schema_version": OUTPUT_SCHEMA_VERSION,
        "generated_at": _format_timestamp(snapshot.generated_at),
        "total_companies": snapshot.total_companies,
        "trending": [item.model_dump(mode="json") for item in snapshot.trending],
        "top": [item.id for item in get_top_trending(snapshot.trending, limit)],
        "sectors": [sector.model_dump(mode="json") for sector in get_trending_sectors(snapshot.trending)],
        "statistics": summarize_trending(snapshot.trending).model_dump(mode="json"),
    }
    if category:
        payload["category"] = {
            "query": category,
            "companies": [item.id for item in get_trending_by_category(snapshot.trending, category, limit)],
        }
    return payload


def _persist_output(payload: dict[str, object], output_path: Path) -> str:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as outfile:
        json.dump(payload, outfile, indent=2, sort_keys=True)
        outfile.write("\n")
    return hashlib.sha256(output_path.read_bytes()).hexdigest()


def _log_summary(
    snapshot: TrendingSnapshot,
    *,
    start: datetime,
    output_path: Path,
    sha: str,
) -> None:
    stats = summarize_trending(snapshot.trending)
    duration = datetime.now(timezone.utc) - start
    logger.info(
        "Trending summary companies=%s UP=%s DOWN=%s STABLE=%s top=%s (%s)",
        stats.total_companies,
        stats.trending_up,
        stats.trending_down,
        stats.stable,
        stats.top_company,
        stats.top_score,
    )
    logger.info(
        "Trending report completed in %.2fs. output=%s sha256=%s",
        duration.total_seconds(),
        output_path,
        sha,
    )


def _format_timestamp(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    try:
        run_pipeline(args.input, args.output, limit=args.limit, category=args.category)
    except TrendingError as exc:
        logger.error("Trending report failed: %s (code=%s)", exc, exc.code)
        return 1
    except Exception as exc:  # pragma: no cover - safeguard
        logger.exception("Unexpected trending report failure: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
