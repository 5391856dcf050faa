from __future__ import annotations

import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from ..catalog import Catalog
from ..errors import CorruptSaveError, PersistenceError
from ..state import SessionState
from .codec import apply_state, decode_text, encode_text
from .paths import STATE_FILE_NAME, ensure_dir

logger = logging.getLogger(__name__)


class SaveManager:
    """Reads and writes ``apstate.json`` in one save directory.

    Writes are atomic and keep the previous file as ``apstate.json.bak``,
    which reads fall back to when the primary file is damaged.
    """

    def __init__(self, save_dir: Path) -> None:
        self.save_dir = Path(save_dir)
        self.state_path = self.save_dir / STATE_FILE_NAME
        self.lock = threading.RLock()

    @property
    def backup_path(self) -> Path:
        return self.state_path.with_suffix(self.state_path.suffix + ".bak")

    # Public API

    def save(self, state: SessionState, catalog: Catalog) -> Path:
        """Persist ``state``. Raises :class:`PersistenceError` on I/O failure."""
        with self.lock:
            text = encode_text(state, catalog)
            try:
                self._atomic_write(self.state_path, text)
            except OSError as e:
                raise PersistenceError(f"Unable to write {self.state_path}: {e}") from e
            logger.debug("Saved state to %s", self.state_path)
            return self.state_path

    def read(self) -> Optional[Dict[str, Any]]:
        """Return the stored document, or None when there is nothing usable."""
        with self.lock:
            if not self.state_path.exists() and not self.backup_path.exists():
                logger.info("No saved state in %s", self.save_dir)
                return None
            try:
                return self._read_with_fallback(self.state_path)
            except CorruptSaveError as e:
                logger.warning("Ignoring saved state: %s", e)
                return None

    def load_into(self, state: SessionState, catalog: Catalog) -> bool:
        """Merge the stored state into ``state``. Returns True if anything was loaded."""
        logger.info("Load state from %s", self.state_path)
        data = self.read()
        if data is None:
            return False
        apply_state(state, catalog, data)
        return True

    # Internal utilities

    def _read_with_fallback(self, path: Path) -> Dict[str, Any]:
        try:
            return self._read(path)
        except (OSError, CorruptSaveError) as primary:
            bak = self.backup_path
            if bak.exists():
                try:
                    data = self._read(bak)
                except (OSError, CorruptSaveError):
                    pass
                else:
                    logger.warning("Recovered state from backup %s (%s)", bak, primary)
                    return data
            raise CorruptSaveError(f"Unable to load state from {path}: {primary}") from primary

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        with path.open("r", encoding="utf-8") as f:
            return decode_text(f.read())

    def _atomic_write(self, path: Path, text: str) -> None:
        """Write to ``path.tmp``, fsync, move the old file to ``.bak``, then rename."""
        tmp = path.with_suffix(path.suffix + ".tmp")
        bak = self.backup_path
        ensure_dir(path.parent)
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            if bak.exists():
                bak.unlink()
            shutil.move(str(path), str(bak))
        os.replace(str(tmp), str(path))
