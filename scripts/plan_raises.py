"""Run the merit-planning pipeline over local exports and print a JSON report.

Usage:
    python scripts/plan_raises.py --salary salary.xlsx --performance perf.csv \
        --proposals proposals.csv --budget 250000 --offline
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from meritflow.core.config import AppSettings
from meritflow.core.exceptions import FileTooLargeError, MeritFlowError
from meritflow.core.logging import configure_logging
from meritflow.currency.converter import CurrencyConverter
from meritflow.currency.providers import ExchangeRateApiProvider, StaticRateProvider
from meritflow.models.results import FileType, ParseResult
from meritflow.persistence.memory_backend import MemoryCacheBackend
from meritflow.pipeline.session import PlanningSession
from meritflow.policy.validator import format_violation, violation_level

logger = logging.getLogger(__name__)


def _read(path: Path, limit_mb: int) -> bytes:
    size = path.stat().st_size
    limit = limit_mb * 1024 * 1024
    if size > limit:
        raise FileTooLargeError(path.name, size, limit)
    return path.read_bytes()


def _issues(result: ParseResult) -> dict[str, Any]:
    return {
        "file": result.file_name,
        "type": str(result.file_type),
        "valid_rows": result.valid_rows,
        "row_count": result.row_count,
        "errors": [e.message for e in result.errors],
        "warnings": len(result.warnings),
    }


async def build_report(salary: list[Path], performance: list[Path] | None = None,
                       proposals: Path | None = None, budget: float | None = None,
                       offline: bool = False, settings: AppSettings | None = None) -> dict[str, Any]:
    """Ingest, process and validate; returns a JSON-ready report."""
    settings = settings or AppSettings()
    provider = StaticRateProvider() if offline or settings.currency.offline else ExchangeRateApiProvider(settings.currency)
    converter = CurrencyConverter(provider=provider, cache=MemoryCacheBackend(),
                                  cache_ttl=settings.currency.cache_ttl_seconds)
    session = PlanningSession(settings, converter=converter)
    limit_mb = settings.ingestion.max_file_size_mb
    try:
        files = [session.ingest(p.name, _read(p, limit_mb), FileType.SALARY) for p in salary]
        files += [session.ingest(p.name, _read(p, limit_mb), FileType.PERFORMANCE) for p in performance or []]
        processed = await session.process()
    finally:
        if isinstance(provider, ExchangeRateApiProvider):
            await provider.aclose()

    report: dict[str, Any] = {
        "files": [_issues(f) for f in files],
        "join": processed.join.summary.model_dump(),
        "rate_sources": processed.rate_sources,
        "warnings": [w.message for w in processed.warnings],
    }
    if proposals is not None:
        imported = session.apply_proposals(proposals.name, _read(proposals, settings.ingestion.proposal_max_file_size_mb))
        report["proposals"] = imported.summary.model_dump(mode="json")
    if budget is not None:
        session.set_budget(budget)

    violations = session.violations()
    report["statistics"] = session.statistics().model_dump(mode="json")
    report["violation_level"] = str(violation_level(violations))
    report["violations"] = [format_violation(v) for v in violations]
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Plan merit raises from HR exports")
    parser.add_argument("--salary", type=Path, action="append", required=True, help="Salary export (repeatable)")
    parser.add_argument("--performance", type=Path, action="append", default=[], help="Performance export (repeatable)")
    parser.add_argument("--proposals", type=Path, default=None, help="Manager proposal CSV")
    parser.add_argument("--budget", type=float, default=None, help="Total raise budget in USD")
    parser.add_argument("--offline", action="store_true", help="Use static exchange rates only")
    args = parser.parse_args(argv)

    settings = AppSettings()
    configure_logging(settings.log_level)
    try:
        report = asyncio.run(build_report(
            args.salary, args.performance, args.proposals, args.budget, args.offline, settings,
        ))
    except MeritFlowError as exc:
        logger.error("Planning run aborted: %s", exc)
        return 2
    json.dump(report, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")
    return 1 if report["violation_level"] == "error" else 0


if __name__ == "__main__":
    sys.exit(main())
