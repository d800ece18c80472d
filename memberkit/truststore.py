"""A directory of trusted remotes kept loaded in memory."""

from __future__ import annotations

import os
import threading
from typing import Any, Optional

from .remotes import PathLike, Remotes

_SUFFIX = ".yaml"


class Store:
    """Remotes loaded from a directory and reloaded when it changes.

    If a watcher is given, its watch(directory, suffix, callback) method is
    called so that changes to YAML files trigger a refresh.
    """

    def __init__(self, directory: PathLike, watcher: Optional[Any] = None) -> None:
        self._lock = threading.Lock()
        self._directory = os.fspath(directory)
        self._remotes = Remotes()
        with self._lock:
            self._remotes.load(self._directory)

        if watcher is not None:
            watcher.watch(self._directory, _SUFFIX, self._on_change)

    def _on_change(self, path: str, event: Any) -> None:
        self.refresh(path)

    def remotes(self) -> Remotes:
        """Return the remotes of the store."""
        with self._lock:
            return self._remotes

    def refresh(self, path: str = "*") -> None:
        """Reload the remotes from the directory."""
        with self._lock:
            try:
                self._remotes.load(self._directory)
            except OSError as exc:
                raise OSError(f'Unable to refresh remotes in path "{path}": {exc}') from exc
            except ValueError as exc:
                raise ValueError(f'Unable to refresh remotes in path "{path}": {exc}') from exc