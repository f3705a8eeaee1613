from __future__ import annotations

import csv
import os
from typing import Iterable, List

from .config import CSV_FIELDNAMES, COLLABORATOR_SEPARATOR
from .models import AuthorRecord


def _ensure_parent_dir(path: str) -> None:
    parent_dir = os.path.dirname(path)
    if parent_dir:
        os.makedirs(parent_dir, exist_ok=True)


def prepare_output(path: str) -> None:
    """
    Make sure the output file can be written before any page is fetched,
    creating parent directories and truncating a file left by an earlier run.

    Raises OSError when the file cannot be created.
    """
    _ensure_parent_dir(path)
    with open(path, "w", newline="", encoding="utf-8"):
        pass


def write_records_csv(records: Iterable[AuthorRecord], path: str,
                      separator: str = COLLABORATOR_SEPARATOR) -> int:
    """
    Write the collaboration dataset: a header row, then one row per record
    with the collaborator pids joined into a single field. The file is
    always rewritten from scratch.

    Returns the number of rows written.
    """
    _ensure_parent_dir(path)
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_row(separator))
            count += 1
    return count


def read_records_csv(path: str, separator: str = COLLABORATOR_SEPARATOR) -> List[AuthorRecord]:
    """
    Load a dataset written by write_records_csv back into records.
    """
    records: List[AuthorRecord] = []
    with open(path, "r", newline="", encoding="utf-8") as csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            # skip empty rows
            if not any(row.values()):
                continue
            collaborators = (row.get("collaborators") or "").strip()
            records.append(
                AuthorRecord(
                    name=(row.get("name") or "").strip(),
                    pid=(row.get("id") or "").strip(),
                    collaborators=tuple(c for c in collaborators.split(separator) if c) if collaborators else (),
                )
            )
    return records
