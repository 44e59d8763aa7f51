from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, Union

from ..core.model import Measurement

logger = logging.getLogger(__name__)

CSV_HEADERS = ('Name', 'Type', 'Value', 'Units', 'Notes')


def export_csv(measurements: Iterable[Measurement], path: Union[str, Path]) -> int:
    """Write measurements to ``path`` with every cell quoted; return the row count."""
    rows = 0
    with open(path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_HEADERS)
        for m in measurements:
            writer.writerow([m.name, m.type.value, m.value, m.unit, m.notes or ''])
            rows += 1
    logger.info("Exported %d measurement(s) to %s", rows, path)
    return rows
