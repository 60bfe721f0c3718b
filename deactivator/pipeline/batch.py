"""Batch file loading.

A batch file is a YAML list produced by the detection phase::

    - job: folder/nightly-build
      action: deactivate
      reason: No successful build in 30 days
    - job: old-release
      action: delete
      reason: build timeout
"""

from pathlib import Path
from typing import List

import yaml
from pydantic import ValidationError

from .models import BatchEntry, BatchFileError


def load_batch_file(path: Path) -> List[BatchEntry]:
    """
    Load and validate a batch file.

    An empty file is an empty batch.

    Args:
        path: Path to the YAML batch file

    Returns:
        Batch entries in file order

    Raises:
        BatchFileError: If the file is missing, unparsable or malformed
    """
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise BatchFileError(f"Batch file not found: {path}") from e
    except yaml.YAMLError as e:
        raise BatchFileError(f"Failed to parse batch file {path}: {e}") from e
    except OSError as e:
        raise BatchFileError(f"Failed to read batch file {path}: {e}") from e

    if raw is None:
        return []

    if not isinstance(raw, list):
        raise BatchFileError(f"Batch file {path} must contain a list of entries")

    entries = []
    for index, item in enumerate(raw):
        try:
            entries.append(BatchEntry.model_validate(item))
        except ValidationError as e:
            problems = "; ".join(
                f"{' -> '.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise BatchFileError(f"Invalid batch entry #{index + 1} in {path}: {problems}") from e

    return entries
