"""Resolve a CSV (or pasted sku,brand list) of supplier items from the command line."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sku_match.config.settings import Settings
from sku_match.config.suppliers import SupplierDirectory
from sku_match.connectors.registry import ConnectorRegistry
from sku_match.fetching.http_fetcher import HttpxPageFetcher
from sku_match.index.source_index import SourceIndex
from sku_match.jobs.batch import BatchMatcher
from sku_match.jobs.input_parser import parse_match_rows
from sku_match.observability.logger import setup_logging
from sku_match.resolution.resolver import SkuResolver
from sku_match.storage.sqlite_index_store import SQLiteIndexStore
from sku_match.verification.verifier import CandidateVerifier


async def main(input_path: Path, tenant_id: str, supplier: str | None, output_path: Path | None) -> None:
    settings = Settings()
    setup_logging(json_output=False)

    parsed = parse_match_rows(input_path.read_text(encoding="utf-8"), supplier_name=supplier)
    print(f"Parsed {len(parsed.rows)} rows ({len(parsed.warnings)} warnings)")
    if not parsed.rows:
        print("Nothing to match.")
        return

    Path(settings.index_db_path).parent.mkdir(parents=True, exist_ok=True)
    store = SQLiteIndexStore(settings.index_db_path)
    await store.initialize()

    directory = (
        SupplierDirectory.from_json_file(settings.supplier_config_path)
        if settings.supplier_config_path
        else SupplierDirectory()
    )

    async with HttpxPageFetcher(
        timeout_s=settings.fetch_timeout_s,
        max_bytes=settings.fetch_max_bytes,
        user_agent=settings.user_agent,
    ) as fetcher:
        resolver = SkuResolver(
            index=SourceIndex(store),
            registry=ConnectorRegistry(directory, fetcher=fetcher, settings=settings),
            verifier=CandidateVerifier(fetcher, settings, directory=directory),
            settings=settings,
        )
        summary = await BatchMatcher(resolver, settings).run(
            tenant_id, parsed.rows, warnings=parsed.warnings
        )

    print(f"Job {summary.job_id}: {summary.status} {summary.counts}")
    for r in summary.results:
        target = r.resolved_url or (r.candidates[0].url if r.candidates else r.error or "-")
        print(f"  [{r.status:<22}] {r.sku or '-':<20} {target}")

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(asdict(summary), indent=2), encoding="utf-8")
        print(f"Results saved to {output_path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Batch-resolve supplier SKUs to product URLs")
    parser.add_argument("input", help="CSV file with a header row, or a sku,brand paste")
    parser.add_argument("--tenant", default="default", help="Tenant id (default: default)")
    parser.add_argument("--supplier", default=None, help="Supplier name for rows without one")
    parser.add_argument("--output", default=None, help="Optional path for the JSON summary")
    args = parser.parse_args()
    asyncio.run(
        main(
            Path(args.input),
            args.tenant,
            args.supplier,
            Path(args.output) if args.output else None,
        )
    )
