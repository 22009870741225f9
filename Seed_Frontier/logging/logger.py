from __future__ import annotations

"""JSON lines event trail for expansion runs."""

import json
from collections import Counter
from pathlib import Path
from typing import Any


def log_record(
    label: str,
    *,
    path: Path,
    iteration: int | None = None,
    value: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
    **extra: Any,
) -> None:
    """Append a record to a JSON lines log file.

    ``value`` mappings are merged into the record; any other value is stored
    under ``"value"``.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, Any] = {"label": label}
    if iteration is not None:
        data["iteration"] = iteration
    if value is not None:
        if isinstance(value, dict):
            data.update(value)
        else:
            data["value"] = value
    if metadata is not None:
        data["metadata"] = metadata
    if extra:
        data.update(extra)
    with path.open("a") as fh:
        fh.write(json.dumps(data) + "\n")


class EventLog:
    """Write engine events to ``path`` and count them per label."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.counts: Counter[str] = Counter()

    def record(
        self, label: str, iteration: int | None = None, **value: Any
    ) -> None:
        """Append ``value`` under ``label`` for ``iteration``."""

        log_record(label, path=self.path, iteration=iteration, value=value or None)
        self.counts[label] += 1

    def read(self) -> list[dict[str, Any]]:
        """Return every record written so far."""

        if not self.path.exists():
            return []
        with self.path.open() as fh:
            return [json.loads(line) for line in fh if line.strip()]
