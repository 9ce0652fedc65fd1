#!/usr/bin/env python3
"""
Main entry point for the DXCC log analyzer.
"""

import argparse
import glob
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import adif_io

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adif_parser import ADIFParser
from dxcc_entities import EntityLookupTable
from dxcc_session import AnalysisSession
from entity_sorter import SORT_COLUMNS
from field_classifiers import BANDS, MODE_CATEGORIES, PLATFORMS
from filter_config import ALL, FilterConfiguration, STATUS_OPTIONS


def expand_inputs(patterns: List[str]) -> List[str]:
    """Expand wildcard patterns the shell left unexpanded."""
    input_files = []
    for arg in patterns:
        if '*' in arg or '?' in arg:
            input_files.extend(sorted(glob.glob(arg)))
        else:
            input_files.append(arg)
    return input_files


def parse_date(value: str):
    """argparse type for YYYY-MM-DD (or YYYYMMDD) dates."""
    for fmt in ('%Y-%m-%d', '%Y%m%d'):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise argparse.ArgumentTypeError(f"invalid date '{value}' (expected YYYY-MM-DD)")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze an ADIF logbook for DXCC entities worked and confirmed per band.")
    parser.add_argument('files', nargs='*', default=["data/logbook.adi"],
                        help="ADIF files or wildcard patterns (several logs are analyzed together)")
    parser.add_argument('--lookup', help="CSV entity table with columns id,name,continent,retired")
    parser.add_argument('--search', default='', help="Substring of entity name or DXCC number")
    parser.add_argument('--status', default='all', choices=STATUS_OPTIONS)
    parser.add_argument('--mode', default=ALL, choices=[ALL] + MODE_CATEGORIES)
    parser.add_argument('--operator', default='', help="Only contacts logged by this callsign")
    parser.add_argument('--continent', default=ALL, help="Continent code, e.g. EU")
    parser.add_argument('--platform', default=ALL, choices=[ALL] + PLATFORMS)
    parser.add_argument('--band', default=ALL, choices=[ALL] + BANDS)
    parser.add_argument('--from', dest='date_from', type=parse_date, help="First QSO date (inclusive)")
    parser.add_argument('--to', dest='date_to', type=parse_date, help="Last QSO date (inclusive)")
    parser.add_argument('--sort', default='name', choices=SORT_COLUMNS, help="Sort column")
    parser.add_argument('--reverse', action='store_true', help="Reverse the column's default direction")
    parser.add_argument('--export', help="Write the filtered table to this CSV file")
    parser.add_argument('--report', help="Write the text report to this file")
    parser.add_argument('--strict', action='store_true',
                        help="Also validate every file with the adif_io reader and stop on errors")
    return parser


def filters_from_args(args: argparse.Namespace) -> FilterConfiguration:
    return FilterConfiguration(
        search=args.search,
        status=args.status,
        mode=args.mode,
        operator=args.operator,
        continent=args.continent,
        platform=args.platform,
        band=args.band,
        date_from=args.date_from,
        date_to=args.date_to,
    )


def validate_with_adif_io(filename: str) -> int:
    """
    Read a file with the adif_io reader and compare record counts.

    Returns the number of QSOs adif_io read. Raises whatever adif_io raises
    for a file it cannot read.
    """
    with open(filename, "r", encoding="utf-8", errors="ignore") as f:
        file_content = f.read()
    qsos, _ = adif_io.read_from_string(file_content)
    tolerant_count = len(ADIFParser.parse_adif_text(file_content))
    if len(qsos) != tolerant_count:
        print(f"WARNING: adif_io read {len(qsos)} QSO records from '{filename}', "
              f"the analyzer read {tolerant_count}")
    return len(qsos)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function for DXCC analysis."""
    args = build_arg_parser().parse_args(argv)
    input_files = expand_inputs(args.files)
    if not input_files:
        print("No files matched the provided pattern(s).")
        return 1

    try:
        filters = filters_from_args(args)
        lookup = EntityLookupTable.from_csv(args.lookup) if args.lookup else EntityLookupTable.builtin()
    except (ValueError, FileNotFoundError, IOError) as e:
        print(f"Error: {e}")
        return 1

    if args.strict:
        for filename in input_files:
            try:
                count = validate_with_adif_io(filename)
                print(f"Validated {count} QSO records in '{filename}'")
            except Exception as e:
                print(f"Error: '{filename}' is not valid ADIF: {e}")
                return 1

    print(f"Analyzing ADIF files: {input_files}")
    session = AnalysisSession(lookup)
    try:
        record_count = session.load_records(ADIFParser.read_logbooks(input_files))
    except (FileNotFoundError, IOError) as e:
        print(f"Error: {e}")
        return 1
    print(f"Read {record_count} QSO records")

    if not session.has_data:
        print("No DXCC entities found in the log.")

    session.set_filters(filters)
    session.set_sort(args.sort)
    if args.reverse:
        session.sort_by(args.sort)

    header = ('+' * 80) + '\n'
    header += f"Report generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
    report = header + "\n" + session.summary_report()
    print(report)

    try:
        if args.report:
            with open(args.report, 'w', encoding='utf-8') as f:
                f.write(report)
            print(f"Report saved to: {args.report}")
        if args.export:
            session.export_csv(args.export)
            print(f"Table exported to: {args.export}")
    except (FileNotFoundError, IOError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
