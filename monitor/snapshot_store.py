"""
File-backed snapshot storage.

One JSON record per website, named after a filesystem-safe form of its URL.
Records survive process restarts, so every invocation of the monitor sees
what the previous one stored.
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import structlog
from pydantic import ValidationError

from monitor.exceptions import SnapshotStoreError
from monitor.models import Found, LoadResult, NotFound, Snapshot, url_to_key

logger = structlog.get_logger(__name__)


class SnapshotStore:
    """Loads and saves Snapshot records as JSON files."""

    def __init__(self, directory: Path):
        """
        Initialize snapshot store.

        Args:
            directory: Directory holding one ``<key>.json`` file per website
        """
        self.directory = Path(directory)
        self.logger = logger.bind(component="snapshot_store")

    def path_for(self, url: str) -> Path:
        return self.directory / f"{url_to_key(url)}.json"

    def exists(self, url: str) -> bool:
        return self.path_for(url).exists()

    def load(self, url: str) -> LoadResult:
        """
        Load the snapshot of a website.

        Args:
            url: Website address

        Returns:
            Found with the snapshot, or NotFound before the first save

        Raises:
            SnapshotStoreError: If the record exists but cannot be read or parsed
        """
        key = url_to_key(url)
        path = self.directory / f"{key}.json"

        if not path.exists():
            return NotFound(key=key)

        try:
            snapshot = Snapshot.model_validate_json(path.read_bytes())
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            self.logger.error("Failed to load snapshot", key=key, error=str(e))
            raise SnapshotStoreError(f"Failed to load snapshot {path}: {e}") from e

        return Found(snapshot=snapshot)

    def save(self, snapshot: Snapshot) -> str:
        """
        Replace the stored record of a website with the given snapshot.

        The record is written to a temporary file first and moved into place,
        so a failed write leaves the previous record intact.

        Args:
            snapshot: Complete snapshot to persist

        Returns:
            The snapshot key

        Raises:
            SnapshotStoreError: If the record cannot be written
        """
        key = url_to_key(snapshot.url)
        path = self.directory / f"{key}.json"

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(snapshot.model_dump_json(indent=2))
                    f.write("\n")
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            self.logger.error("Failed to save snapshot", key=key, error=str(e))
            raise SnapshotStoreError(f"Failed to save snapshot {path}: {e}") from e

        self.logger.debug(
            "Stored snapshot",
            key=key,
            change_count=snapshot.change_count,
            error_count=snapshot.error_count
        )

        return key

    def delete(self, url: str) -> bool:
        """
        Delete the record of a website.

        Returns:
            True if deleted, False if there was none
        """
        path = self.path_for(url)
        try:
            path.unlink()
        except FileNotFoundError:
            self.logger.warning("Snapshot not found for deletion", key=path.stem)
            return False
        except OSError as e:
            raise SnapshotStoreError(f"Failed to delete snapshot {path}: {e}") from e

        self.logger.info("Deleted snapshot", key=path.stem)
        return True

    def list_snapshots(self) -> List[Snapshot]:
        """
        Load every stored snapshot, ordered by key.

        Records that fail to parse are logged and skipped.
        """
        if not self.directory.exists():
            return []

        snapshots = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                snapshots.append(Snapshot.model_validate_json(path.read_bytes()))
            except (OSError, UnicodeDecodeError, ValidationError) as e:
                self.logger.warning("Skipping unreadable snapshot", file=path.name, error=str(e))

        return snapshots

    def get_stats(self) -> Dict[str, Any]:
        """Counts across all stored snapshots."""
        snapshots = self.list_snapshots()
        return {
            "total_snapshots": len(snapshots),
            "total_changes": sum(s.change_count for s in snapshots),
            "total_errors": sum(s.error_count for s in snapshots),
            "with_errors": sum(1 for s in snapshots if s.error_count > 0),
            "disabled": sum(1 for s in snapshots if not s.enabled),
        }

