"""Case-content loaders.

Loads the three CSVs a case is made of:
- issues.csv: id, text, elements, related_laws[, difficulty]
- facts.csv:  id, content
- laws.csv:   id, content[, title]

List-valued columns (elements, related_laws) are "|"-separated.
"""

from dataclasses import dataclass
from pathlib import Path

import pandas as pd

ISSUES_FILE = "issues.csv"
FACTS_FILE = "facts.csv"
LAWS_FILE = "laws.csv"

ISSUES_REQUIRED = {"id", "text", "elements", "related_laws"}
FACTS_REQUIRED = {"id", "content"}
LAWS_REQUIRED = {"id", "content"}

LIST_SEPARATOR = "|"


@dataclass
class CaseBundle:
    """Container for the loaded case tables.

    Attributes:
        issues: Disputed issues with their required elements
        facts: Fact statements learners cite as [Fx]
        laws: Law articles learners cite as [Ly]
    """

    issues: pd.DataFrame
    facts: pd.DataFrame
    laws: pd.DataFrame


def load_from_local(data_dir: Path | str) -> CaseBundle:
    """Load all 3 CSVs from local directory.

    Ids are read as strings so "01" and "1" stay distinct.

    Args:
        data_dir: Path to directory containing CSV files

    Returns:
        CaseBundle with all tables

    Raises:
        FileNotFoundError: If any required file is missing
    """
    data_dir = Path(data_dir)

    issues_path = data_dir / ISSUES_FILE
    facts_path = data_dir / FACTS_FILE
    laws_path = data_dir / LAWS_FILE

    # Validate all files exist
    for path in [issues_path, facts_path, laws_path]:
        if not path.exists():
            raise FileNotFoundError(f"Required file not found: {path}")

    return CaseBundle(
        issues=pd.read_csv(issues_path, dtype={"id": str}),
        facts=pd.read_csv(facts_path, dtype={"id": str}),
        laws=pd.read_csv(laws_path, dtype={"id": str}),
    )


def validate_datasets(bundle: CaseBundle) -> dict[str, bool]:
    """Validate that all tables have expected columns.

    Args:
        bundle: CaseBundle to validate

    Returns:
        Dict mapping table name to validation result
    """
    return {
        "issues": ISSUES_REQUIRED.issubset(set(bundle.issues.columns)),
        "facts": FACTS_REQUIRED.issubset(set(bundle.facts.columns)),
        "laws": LAWS_REQUIRED.issubset(set(bundle.laws.columns)),
    }
