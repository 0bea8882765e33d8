"""
Command-line entry point for CSV import/export against JSON-seeded stores.

Usage:
    school-dashboard import students students.csv --seed students.json --progress
    school-dashboard export grades --seed grades.json --out exports/
    school-dashboard template students --out templates/
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import settings
from .csv_utils import check_upload, generate_csv, grade_template, student_template
from .exceptions import SchoolDashboardError
from .logging_config import setup_logging
from .repositories import InMemoryRepository
from .services import GradeService, StudentService

SERVICES = {
    "students": ("Student", StudentService, student_template),
    "grades": ("Grade", GradeService, grade_template),
}


def _build_service(entity: str, seed: Optional[str]):
    display_name, service_class, _ = SERVICES[entity]
    if seed:
        repository = InMemoryRepository.from_json(display_name, seed)
    else:
        repository = InMemoryRepository(display_name)
    return service_class(repository)


def _run_import(args) -> int:
    path = Path(args.file)
    check_upload(path.name, path.stat().st_size)
    if path.suffix.lower() != ".csv":
        print(f"❌ {path.name}: convert spreadsheets to CSV before importing")
        return 1

    service = _build_service(args.entity, args.seed)
    result = service.bulk_import(path, progress=args.progress)

    print(f"✅ Imported {result.success_count} of {result.total_rows} {args.entity}")
    if result.has_errors:
        print(f"⚠️ Import completed with {len(result.errors)} errors:")
        for line in result.error_lines(limit=settings.MAX_REPORTED_ERRORS):
            print(f"  {line}")
    return 0


def _run_export(args) -> int:
    service = _build_service(args.entity, args.seed)
    result = service.bulk_export(export_dir=args.out)
    if result.path:
        print(f"✅ Exported {result.count} {args.entity} to {result.path}")
    else:
        print(f"⚠️ No {args.entity} to export")
    return 0


def _run_template(args) -> int:
    _, _, template = SERVICES[args.entity]
    path = generate_csv(template(), f"{args.entity}-template.csv", args.out)
    print(f"✅ Template written to {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="school-dashboard", description=settings.APP_NAME)
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import a CSV file")
    import_parser.add_argument("entity", choices=sorted(SERVICES))
    import_parser.add_argument("file")
    import_parser.add_argument("--seed", help="JSON file with existing records")
    import_parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    import_parser.set_defaults(handler=_run_import)

    export_parser = subparsers.add_parser("export", help="Export records to CSV")
    export_parser.add_argument("entity", choices=sorted(SERVICES))
    export_parser.add_argument("--seed", help="JSON file with existing records")
    export_parser.add_argument("--out", default=None, help="Output directory")
    export_parser.set_defaults(handler=_run_export)

    template_parser = subparsers.add_parser("template", help="Write an import template")
    template_parser.add_argument("entity", choices=sorted(SERVICES))
    template_parser.add_argument("--out", default=None, help="Output directory")
    template_parser.set_defaults(handler=_run_template)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        return args.handler(args)
    except SchoolDashboardError as e:
        print(f"❌ {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
