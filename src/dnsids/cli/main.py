from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dnsids.config import DEFAULT_QUERY_COUNT, DEFAULT_SERVICE_HOST, DEFAULT_SERVICE_PORT, get_db_path
from dnsids.data.export import export_records_csv, read_records_csv
from dnsids.data.simulations import generate_dataset
from dnsids.data.store import InMemoryRecordStore, RecordSource, SqliteRecordStore
from dnsids.logging_utils import configure_logging
from dnsids.models.engine import ThreatAnalyzer
from dnsids.service.schemas import AnalysisResponse

logger = logging.getLogger(__name__)


def _sqlite_path(args: argparse.Namespace) -> Path:
    return Path(args.sqlite) if args.sqlite else get_db_path()


def cmd_generate(args: argparse.Namespace) -> None:
    records = generate_dataset(args.count, seed=args.seed)
    store = SqliteRecordStore(_sqlite_path(args))
    if not args.append:
        store.clear()
    store.save_all(records)
    print(f"Generated {len(records)} queries -> {store.path}")
    if args.csv:
        path = export_records_csv(records, Path(args.csv))
        print(f"Dataset written to {path}")


def cmd_analyze(args: argparse.Namespace) -> None:
    source: RecordSource
    if args.input_csv:
        source = InMemoryRecordStore(read_records_csv(Path(args.input_csv)))
    else:
        source = SqliteRecordStore(_sqlite_path(args))
    report = ThreatAnalyzer(source).analyze()

    if args.json:
        print(json.dumps(AnalysisResponse.from_report(report).model_dump(), indent=2))
        return

    print(
        f"{report.attack_type}: {report.threats_detected} threat(s) in "
        f"{report.queries_analyzed} queries, risk={report.risk_score} ({report.severity}), "
        f"{report.analysis_time_ms} ms"
    )
    for alert in report.threats:
        print(f"[{alert.risk_score:>3}] {alert.type.value:<24} {alert.source_ip}")
        for line in alert.description.splitlines():
            print(f"      {line}")
    print()
    print(report.recommendation)


def cmd_export(args: argparse.Namespace) -> None:
    records = SqliteRecordStore(_sqlite_path(args)).fetch_all()
    path = export_records_csv(records, Path(args.output))
    print(f"Exported {len(records)} queries -> {path}")


def cmd_serve(args: argparse.Namespace) -> None:
    from dnsids.service.run import serve

    serve(args.host, args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dnsids")
    sub = parser.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate")
    g.add_argument("--count", type=int, default=DEFAULT_QUERY_COUNT)
    g.add_argument("--seed", type=int, default=None)
    g.add_argument("--sqlite", default=None)
    g.add_argument("--csv", default=None)
    g.add_argument("--append", action="store_true")
    g.set_defaults(func=cmd_generate)

    a = sub.add_parser("analyze")
    src = a.add_mutually_exclusive_group()
    src.add_argument("--sqlite", default=None)
    src.add_argument("--input-csv", default=None)
    a.add_argument("--json", action="store_true")
    a.set_defaults(func=cmd_analyze)

    e = sub.add_parser("export")
    e.add_argument("--output", required=True)
    e.add_argument("--sqlite", default=None)
    e.set_defaults(func=cmd_export)

    s = sub.add_parser("serve")
    s.add_argument("--host", default=DEFAULT_SERVICE_HOST)
    s.add_argument("--port", type=int, default=DEFAULT_SERVICE_PORT)
    s.set_defaults(func=cmd_serve)

    return parser


def main() -> None:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args()
    try:
        args.func(args)
    except ValueError as exc:
        logger.error("%s", exc)
        parser.exit(2, f"error: {exc}\n")


if __name__ == "__main__":
    main()
