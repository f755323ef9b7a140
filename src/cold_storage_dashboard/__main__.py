import argparse
import json
import logging
import sys
from pathlib import Path

from .db import get_db_path, open_conn
from .feature_flags import resolve_schema
from .security import sanitize_path, write_csv
from .summary import FilterCriteria, get_schema, load_dashboard


def _build_parser():
    parser = argparse.ArgumentParser(
        description="Cold storage facility summary",
    )

    parser.add_argument(
        "--db",
        default=None,
        help="SQLite database holding the Cold_Storage survey table",
    )
    parser.add_argument("--state", default=None, help="Only facilities in this state")
    parser.add_argument("--city", default=None, help="Only facilities in this city")
    parser.add_argument(
        "--start-date",
        default=None,
        help="Earliest QC/observation date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--end-date",
        default=None,
        help="Latest QC/observation date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--schema",
        choices=["registry", "utilization"],
        default=None,
        help="Record shape (defaults to CSD_FEATURE_UTILIZATION_SCHEMA)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json", "csv"],
        default="text",
        help="Output format",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write results to a file (path) instead of stdout",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, etc.)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit one JSON summary line after the results",
    )
    return parser


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level.upper(), stream=sys.stderr)

    try:
        criteria = FilterCriteria.from_params(
            state=args.state,
            city=args.city,
            start_date=args.start_date,
            end_date=args.end_date,
        )
    except ValueError as exc:
        parser.error(str(exc))

    schema = get_schema(resolve_schema(args.schema))
    fieldnames = [spec.name for spec in schema.fields]

    with open_conn(args.db or get_db_path()) as conn:
        result = load_dashboard(conn, criteria, schema)

    rows = [r.to_dict() for r in result.records]
    payload = {
        "record_schema": result.schema,
        "filters": criteria.to_dict(),
        "facets": result.facets.to_dict(),
        "records": rows,
    }

    if args.output:
        project_root = Path(__file__).resolve().parents[2]
        output_path = sanitize_path(args.output, project_root)
        with output_path.open("w", newline="", encoding="utf-8") as handle:
            if args.format == "csv":
                write_csv(handle, fieldnames, rows)
            else:
                handle.write(json.dumps(payload, default=str))
    elif args.format == "json":
        print(json.dumps(payload, default=str))
    elif args.format == "csv":
        write_csv(sys.stdout, fieldnames, rows)
    else:
        print(f"Found {len(rows)} facilities:")
        for i, row in enumerate(rows):
            print(f"{i+1}. {row.get('state', '')} / {row.get('city', '')}: {row.get('survey_id', '')}")
        print(f"States: {', '.join(result.facets.states)}")
        print(f"Cities: {', '.join(result.facets.cities)}")

    if args.log_json:
        summary = {
            "record_schema": result.schema,
            "filters": criteria.applied(),
            "records": len(rows),
            "states": len(result.facets.states),
            "cities": len(result.facets.cities),
            "defaulted_fields": result.defaulted_fields,
        }
        print(json.dumps(summary))


def _safe_main():
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:
        print(json.dumps({"error": str(exc)}))
        raise SystemExit(1)


if __name__ == "__main__":
    _safe_main()
