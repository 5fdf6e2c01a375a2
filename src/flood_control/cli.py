from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import AnalysisConfig, InputDiscoveryConfig
from .file_io import discover_dataset, write_csv_reports, write_summary_json, write_workbook
from .report import load_status_line, render_all_reports
from .runner import run_analysis


def setup_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    defaults = AnalysisConfig()
    parser = argparse.ArgumentParser(
        description="Analyze public flood-control project records and export efficiency reports.",
    )
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Dataset CSV file (default: discover in --input-dir)",
    )
    parser.add_argument(
        "--input-dir",
        type=str,
        default=str(Path.cwd()),
        help="Folder searched for the dataset when --input is not given (default: current folder)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="outputs",
        help="Folder for CSV/JSON artifacts (default: ./outputs)",
    )
    parser.add_argument(
        "--xlsx",
        type=str,
        default=None,
        help="Also write every report into this Excel workbook",
    )
    parser.add_argument("--year-from", type=int, default=defaults.year_from,
                        help=f"First funding year analyzed (default: {defaults.year_from})")
    parser.add_argument("--year-to", type=int, default=defaults.year_to,
                        help=f"Last funding year analyzed (default: {defaults.year_to})")
    parser.add_argument("--min-projects", type=int, default=defaults.min_contractor_projects,
                        help="Minimum projects for a contractor to be ranked "
                             f"(default: {defaults.min_contractor_projects})")
    parser.add_argument("--top", type=int, default=defaults.contractor_report_size,
                        help=f"Contractor report size (default: {defaults.contractor_report_size})")
    parser.add_argument("--quiet", action="store_true", help="Do not print report tables")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logs")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    cfg = AnalysisConfig(
        year_from=args.year_from,
        year_to=args.year_to,
        min_contractor_projects=args.min_projects,
        contractor_report_size=args.top,
    )
    try:
        cfg.validate()
    except ValueError as e:
        parser.error(str(e))

    if args.input:
        dataset = Path(args.input)
    else:
        dataset = discover_dataset(args.input_dir, InputDiscoveryConfig())

    output = run_analysis(dataset, cfg)
    print(load_status_line(output.ingestion, len(output.analyzed), cfg))

    tables = output.tables()
    summary = output.summary_dict()

    if not args.quiet:
        print()
        print(render_all_reports(tables, cfg))

    output_dir = Path(args.output_dir)
    write_csv_reports(tables, output_dir)
    write_summary_json(summary, output_dir)
    if args.xlsx:
        write_workbook(tables, summary, args.xlsx)

    print(f"\nReports saved to: {output_dir.resolve()}")
    return 1 if output.ingestion.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
