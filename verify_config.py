#!/usr/bin/env python3
"""Check config.example.yaml and batch.example.yaml against the expected layout."""

import sys
from pathlib import Path

import yaml

from deactivator.config.loader import validate_config_file
from deactivator.pipeline import BatchFileError, load_batch_file


def verify_batch_example(batch_file: Path) -> bool:
    """Load the example batch file and print what it contains."""
    try:
        entries = load_batch_file(batch_file)
    except BatchFileError as e:
        print(f"✗ {e}")
        return False

    print(f"✓ {batch_file} is valid")
    for entry in entries:
        print(f"  - {entry.action.value}: {entry.job} ({entry.reason})")
    return True


def verify_examples() -> bool:
    config_file = Path("config.example.yaml")
    batch_file = Path("batch.example.yaml")

    ok = True
    if not config_file.exists():
        print(f"✗ {config_file} not found")
        ok = False
    elif validate_config_file(config_file):
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
        recipients = (config.get("notifications") or {}).get("admin_recipients") or []
        print(f"  - {len(recipients)} admin recipients configured")
    else:
        ok = False

    if not batch_file.exists():
        print(f"✗ {batch_file} not found")
        ok = False
    elif not verify_batch_example(batch_file):
        ok = False

    return ok


if __name__ == "__main__":
    sys.exit(0 if verify_examples() else 1)
