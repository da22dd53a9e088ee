"""
Command-line interface for featurize.

Usage:
    python -m featurize extract --schema listing.yaml --input listings.jsonl --role feature --output X.parquet
    python -m featurize columns --schema listing.yaml --role label
    python -m featurize split --input listings.jsonl --ratio 0.8 --seed 7 --train train.jsonl --test test.jsonl
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import polars as pl
import yaml

from featurize import config
from featurize.errors import FeaturizeError
from featurize.flatten import column_names
from featurize.matrix import extract
from featurize.registry import Schema
from featurize.roles import Role
from featurize.utils.split import split


def read_records(path: Path) -> List[Dict[str, Any]]:
    """Load dict records from .jsonl, .json (list of objects) or .csv."""
    suffix = path.suffix.lower()
    if suffix == '.jsonl':
        with open(path) as f:
            return [json.loads(line) for line in f if line.strip()]
    if suffix == '.json':
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = [data]
        return data
    if suffix == '.csv':
        return pl.read_csv(path).to_dicts()
    raise ValueError(f"Unsupported input format: {suffix} "
                     f"(expected one of {config.get('io.input_formats')})")


def write_records(records: List[Dict[str, Any]], path: Path) -> None:
    """Write dict records as JSON lines."""
    with open(path, 'w') as f:
        for rec in records:
            f.write(json.dumps(rec) + '\n')


def write_frame(df: pl.DataFrame, path: Path) -> Path:
    """Write a DataFrame as parquet or csv, chosen by suffix."""
    if not path.suffix:
        path = path.with_suffix('.' + config.get('io.default_format', 'parquet'))
    suffix = path.suffix.lower()
    if suffix == '.parquet':
        df.write_parquet(path)
    elif suffix == '.csv':
        df.write_csv(path)
    else:
        raise ValueError(f"Unsupported output format: {suffix} "
                         f"(expected one of {config.get('io.output_formats')})")
    return path


def cmd_extract(args: argparse.Namespace) -> int:
    """Extract a feature or label matrix from a record file."""
    schema = Schema.from_yaml(args.schema)
    records = read_records(Path(args.input))

    result = extract(records, args.role, schema=schema)
    report = result.report
    print(f"Extracted {report.n_rows} rows x {len(result.columns)} columns ({args.role})")
    if report.n_degraded:
        print(f"  Degraded field values: {report.n_degraded} {report.degraded}")

    if args.output:
        path = write_frame(result.to_frame(), Path(args.output))
        print(f"  Written: {path}")
    return 0


def cmd_columns(args: argparse.Namespace) -> int:
    """Print the column layout for a role."""
    schema = Schema.from_yaml(args.schema)
    sample = None
    if args.input:
        records = read_records(Path(args.input))
        sample = records[0] if records else None

    for field in schema.select(args.role):
        value = field.read(sample) if sample is not None else None
        for name in column_names(field, value):
            print(name)
    return 0


def cmd_split(args: argparse.Namespace) -> int:
    """Randomly split a record file into train and test files."""
    records = read_records(Path(args.input))
    train, test = split(records, args.ratio, rng=args.seed)
    write_records(train, Path(args.train))
    write_records(test, Path(args.test))
    print(f"Split {len(records)} records: {len(train)} train, {len(test)} test")
    return 0


def main(argv=None) -> int:
    """Main entry point for the featurize CLI."""
    parser = argparse.ArgumentParser(
        prog='featurize',
        description="featurize - numeric matrices from tagged records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Feature matrix from JSON lines, written as parquet
  python -m featurize extract --schema listing.yaml --input listings.jsonl --output X.parquet

  # Label matrix as csv
  python -m featurize extract --schema listing.yaml --input listings.jsonl --role label --output y.csv

  # 80/20 split, reproducible
  python -m featurize split --input listings.jsonl --ratio 0.8 --seed 7 --train train.jsonl --test test.jsonl
        """,
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", required=True)
    roles = [r.value for r in Role]

    extract_parser = subparsers.add_parser("extract", help="Build a feature or label matrix")
    extract_parser.add_argument("--schema", required=True, help="YAML schema file")
    extract_parser.add_argument("--input", "-i", required=True, help="Records (.jsonl, .json, .csv)")
    extract_parser.add_argument(
        "--role", "-r",
        default=Role.FEATURE.value,
        choices=roles,
        help="Role to extract (default: feature)"
    )
    extract_parser.add_argument("--output", "-o", help="Output file (.parquet or .csv)")
    extract_parser.set_defaults(func=cmd_extract)

    columns_parser = subparsers.add_parser("columns", help="List matrix column names")
    columns_parser.add_argument("--schema", required=True, help="YAML schema file")
    columns_parser.add_argument("--role", "-r", default=Role.FEATURE.value, choices=roles)
    columns_parser.add_argument("--input", "-i", help="Sample records, sizes unbounded arrays")
    columns_parser.set_defaults(func=cmd_columns)

    split_parser = subparsers.add_parser("split", help="Random train/test split")
    split_parser.add_argument("--input", "-i", required=True, help="Records (.jsonl, .json, .csv)")
    split_parser.add_argument(
        "--ratio",
        type=float,
        default=config.get('split.default_ratio', 0.8),
        help="Training proportion (default: %(default)s)"
    )
    split_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    split_parser.add_argument("--train", required=True, help="Training output (.jsonl)")
    split_parser.add_argument("--test", required=True, help="Testing output (.jsonl)")
    split_parser.set_defaults(func=cmd_split)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (FeaturizeError, ValueError, OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
