"""JSON file sink for exports and session snapshots."""

import json
import logging
from pathlib import Path
from typing import Any

from loan_recon.exceptions import SinkError
from loan_recon.sinks.serialization import snapshot_to_dict, to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Write exports and snapshots as JSON files.

    Exports land in ``<output_dir>/<entity_type>.json``. Each snapshot
    overwrites ``<output_dir>/sessions/<session_id>/<step>.json`` so the
    directory always holds the latest state of every step.
    """

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to a JSON file."""
        file_path = self.output_dir / f"{entity_type}.json"
        self._dump(file_path, [to_dict(record) for record in records])
        self._counts[entity_type] = len(records)

    def save(self, snapshot: Any) -> bool:
        """Persist a session snapshot, replacing the previous one for its step."""
        session_dir = self.output_dir / "sessions" / snapshot.session_id
        file_path = session_dir / f"{snapshot.step.value}.json"
        try:
            session_dir.mkdir(parents=True, exist_ok=True)
            self._dump(file_path, snapshot_to_dict(snapshot))
        except OSError as exc:
            raise SinkError(f"Cannot write snapshot to {file_path}: {exc}") from exc

        key = f"snapshot.{snapshot.step.value}"
        self._counts[key] = self._counts.get(key, 0) + 1
        logger.debug("Snapshot written to %s", file_path)
        return True

    def load(self, session_id: str, step: str) -> dict | None:
        """Read back the latest snapshot of a step, None if never saved."""
        file_path = self.output_dir / "sessions" / session_id / f"{step}.json"
        if not file_path.exists():
            return None
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")

    def _dump(self, file_path: Path, data: Any) -> None:
        with open(file_path, "w", encoding="utf-8") as f:
            if self.pretty:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            else:
                json.dump(data, f, ensure_ascii=False, default=str)
