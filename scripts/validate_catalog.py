#!/usr/bin/env python
"""Validate case content and print a law-reference coverage report.

Usage:
    python -m scripts.validate_catalog --data ./case
"""

import argparse
import sys
from pathlib import Path


def main() -> int:
    """Run catalog validation and print report."""
    parser = argparse.ArgumentParser(
        description="Validate case content and print coverage report"
    )
    parser.add_argument(
        "--data",
        type=Path,
        required=True,
        help="Directory containing issues.csv, facts.csv and laws.csv",
    )
    args = parser.parse_args()

    print("=" * 60)
    print("Socratic Argumentation - Case Catalog Report")
    print("=" * 60)
    print()

    # Load tables
    print("Loading case content...")
    try:
        from dialogue.datasets.loaders import load_from_local, validate_datasets

        bundle = load_from_local(args.data)
        print(f"  Source: {args.data}")
    except Exception as e:
        print(f"  ERROR: Failed to load case content: {e}")
        return 1

    # Validate columns
    print()
    print("Validating columns...")
    validation = validate_datasets(bundle)
    all_valid = True
    for name, valid in validation.items():
        status = "OK" if valid else "MISSING COLUMNS"
        print(f"  {name}: {status}")
        if not valid:
            all_valid = False

    if not all_valid:
        print()
        print("ERROR: Some tables have missing columns")
        return 1

    print()
    print("Table sizes:")
    print(f"  issues: {len(bundle.issues):,} rows")
    print(f"  facts:  {len(bundle.facts):,} rows")
    print(f"  laws:   {len(bundle.laws):,} rows")

    # Build indexes
    print()
    print("Building indexes...")
    from dialogue.datasets.builder import CaseCatalogBuilder

    builder = CaseCatalogBuilder(bundle)
    builder.build_indexes()

    print(f"  issue_by_id: {len(builder.issue_by_id):,} entries")
    print(f"  fact_by_id:  {len(builder.fact_by_id):,} entries")
    print(f"  law_by_id:   {len(builder.law_by_id):,} entries")

    print()
    print("Computing coverage...")
    coverage = builder.compute_coverage()
    print()
    print(coverage)

    unresolved = [
        (issue.id, ref)
        for issue in builder.issue_by_id.values()
        for ref in issue.related_laws
        if ref not in builder.law_by_id
    ]
    if unresolved:
        print()
        print("Unresolved law references:")
        for issue_id, ref in unresolved:
            print(f"  {issue_id} -> {ref}")

    print()
    print("=" * 60)
    print("Validation complete!")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
