#!/usr/bin/env python3
"""
Find near-duplicate rows in a CSV file.

Reads a CSV file with a header row, compares the chosen columns with fuzzy
matching and prints the duplicate pairs. Optionally writes the pairs and the
deduplicated rows to new CSV files.
"""

import argparse
import csv
import os
import sys
from typing import List, Dict

from recorddedup.core.detection import (
    ConfigManager, DetectionError, DuplicateDetectionEngine, DetectionResults,
    resolve_duplicates, scorer_registry
)

SAMPLE_HEADERS = ["Title", "Doi", "Author", "Journal", "Year"]
SAMPLE_ROWS = [
    ["Machine Learning in Healthcare", "10.1234/jmlr.2023.001", "Smith, J.", "Journal of ML Research", "2023"],
    ["Artificial Intelligence and Ethics", "10.5678/ethics.2023.002", "Johnson, A.", "Ethics in Computing", "2023"],
    ["Deep Learning Applications", "10.9012/ieee.2023.003", "Williams, B.", "IEEE Transactions", "2023"],
    ["Machine Learning for Medical Imaging", "10.2345/jmir.2023.004", "Brown, C.", "Journal of Medical Imaging", "2023"],
    ["Deep Learning in Healthcare", "10.6789/aijh.2023.005", "Taylor, M.", "AI in Healthcare", "2023"],
]


def read_rows(path: str) -> List[Dict[str, str]]:
    """Read CSV rows as dictionaries, dropping completely empty lines."""
    with open(path, newline='', encoding='utf-8-sig') as f:
        reader = csv.DictReader(f)
        return [
            {key: value for key, value in row.items() if key is not None}
            for row in reader
            if any(value for value in row.values() if isinstance(value, str))
        ]


def write_rows(path: str, rows: List[Dict[str, str]], fieldnames: List[str]):
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction='ignore')
        writer.writeheader()
        writer.writerows(rows)


def write_sample(path: str):
    """Write a small sample CSV of articles."""
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(SAMPLE_HEADERS)
        writer.writerows(SAMPLE_ROWS)


def pair_rows(results: DetectionResults, keys: List[str]) -> List[Dict[str, str]]:
    """Flatten duplicate pairs into CSV rows."""
    rows = []
    for pair in results.pairs:
        row = {"Index 1": str(pair.index1), "Index 2": str(pair.index2)}
        for key in keys:
            row[f"{key} 1"] = pair.record1.get(key) or ""
            row[f"{key} 2"] = pair.record2.get(key) or ""
        row["Similarity"] = f"{pair.similarity}%"
        rows.append(row)
    return rows


def print_summary(results: DetectionResults, verbose: bool = False):
    print("\n" + "=" * 50)
    print("DUPLICATE DETECTION SUMMARY")
    print("=" * 50)
    print(f"Total records:      {results.total_records:,}")
    print(f"Pairs compared:     {results.total_pairs:,}")
    print(f"Exact duplicates:   {results.exact_duplicates:,}")
    print(f"Fuzzy duplicates:   {results.fuzzy_duplicates:,}")
    print(f"Clean records:      {results.clean_records:,}")
    print(f"Detection time:     {results.detection_time_ms}ms")
    if results.errors:
        print(f"Scoring errors:     {len(results.errors):,}")

    if verbose and results.pairs:
        print("\nDUPLICATE PAIRS:")
        print("-" * 20)
        for pair in results.pairs:
            print(f"  {pair.similarity:3d}% - rows {pair.index1} and {pair.index2}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Find near-duplicate rows in a CSV file")
    parser.add_argument('csv_file', nargs='?', help='CSV file with a header row')
    parser.add_argument('--config', help='JSON detection config; command line options override it')
    parser.add_argument('--keys', nargs='+',
                        help='One or two columns to compare (default: Title)')
    parser.add_argument('--threshold', type=int,
                        help='Minimum similarity 0-100 (default: 85)')
    parser.add_argument('--algorithm',
                        choices=scorer_registry.list_scorers(), help='Fuzzy matching algorithm')
    parser.add_argument('--batch-size', type=int, help='Pairs scored per batch')
    parser.add_argument('--output', help='Write the deduplicated rows to this CSV file')
    parser.add_argument('--pairs-out', help='Write the duplicate pairs to this CSV file')
    parser.add_argument('--sample', metavar='PATH', help='Write a sample CSV file and exit')
    parser.add_argument('--quiet', action='store_true', help='Do not print progress')
    parser.add_argument('--verbose', action='store_true', help='List every duplicate pair')
    args = parser.parse_args(argv)

    if args.sample:
        write_sample(args.sample)
        print(f"Sample written to {args.sample}")
        return 0

    if not args.csv_file:
        parser.error("csv_file is required unless --sample is given")

    try:
        rows = read_rows(args.csv_file)
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        print(f"Failed to read {args.csv_file}: {e}", file=sys.stderr)
        return 1

    if args.config and not os.path.exists(args.config):
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 1

    config_manager = ConfigManager(args.config)
    config = config_manager.load_config() if args.config else config_manager.get_default_config()
    if args.keys:
        config.comparison_keys = args.keys
    if args.threshold is not None:
        config.threshold = args.threshold
    if args.algorithm:
        config.scorer_algorithm = args.algorithm
    if args.batch_size is not None:
        config.batch_size = args.batch_size
    keys = list(config.comparison_keys)

    missing = [key for key in keys if rows and key not in rows[0]]
    if missing:
        print(f"Columns not found in {args.csv_file}: {', '.join(missing)}", file=sys.stderr)
        return 1

    def progress_callback(percentage: int):
        if not args.quiet:
            print(f"Progress: {percentage}%")

    try:
        engine = DuplicateDetectionEngine(config)
        results = engine.detect_duplicates(rows, progress_callback=progress_callback)
    except DetectionError as e:
        print(f"Detection failed: {e}", file=sys.stderr)
        return 1

    print_summary(results, args.verbose)

    fieldnames = list(rows[0].keys()) if rows else keys
    if args.pairs_out:
        pair_fields = ["Index 1", "Index 2"]
        for key in keys:
            pair_fields.extend([f"{key} 1", f"{key} 2"])
        pair_fields.append("Similarity")
        write_rows(args.pairs_out, pair_rows(results, keys), pair_fields)
        print(f"Duplicate pairs written to {args.pairs_out}")

    if args.output:
        write_rows(args.output, resolve_duplicates(rows, results.pairs), fieldnames)
        print(f"Deduplicated rows written to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
