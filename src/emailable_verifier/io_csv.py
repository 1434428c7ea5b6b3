"""CSV serialization helpers."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from dataclasses import fields
from pathlib import Path

from .models import VerifyResponse

CSV_FIELDS = [item.name for item in fields(VerifyResponse)]


def write_rows(path: str | Path, responses: Iterable[VerifyResponse]) -> int:
    """Write verification results to CSV with stable schema; return the row count."""
    output_path = Path(path)
    count = 0
    with output_path.open("w", newline="", encoding="utf-8") as file_obj:
        writer = csv.DictWriter(file_obj, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for response in responses:
            row = {key: "" if value is None else value for key, value in response.to_dict().items()}
            writer.writerow(row)
            count += 1
    return count
