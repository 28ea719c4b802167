"""In-memory output asset map shared by every stylesheet task."""

import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

Content = Union[bytes, str]


def _as_bytes(content: Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


class AssetMap:
    """Name -> bytes mapping guarded by a lock.

    Stylesheet tasks run on worker threads and each one replaces its own
    stylesheet and deletes the images it consumed, so every access goes
    through the lock. Deleting an absent name is a no-op.
    """

    def __init__(self, assets: Optional[Dict[str, Content]] = None):
        self._lock = threading.Lock()
        self._assets: Dict[str, bytes] = {}
        for name, content in (assets or {}).items():
            self._assets[name] = _as_bytes(content)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._assets)

    def __contains__(self, name):
        with self._lock:
            return name in self._assets

    def __len__(self):
        with self._lock:
            return len(self._assets)

    def read_bytes(self, name: str) -> bytes:
        with self._lock:
            return self._assets[name]

    def read_text(self, name: str) -> str:
        return self.read_bytes(name).decode("utf-8")

    def size(self, name: str) -> Optional[int]:
        with self._lock:
            data = self._assets.get(name)
        return None if data is None else len(data)

    def sizes(self) -> Dict[str, int]:
        """Snapshot of every asset's byte size."""
        with self._lock:
            return {name: len(data) for name, data in self._assets.items()}

    def insert(self, name: str, content: Content) -> None:
        with self._lock:
            self._assets[name] = _as_bytes(content)

    def replace(self, name: str, content: Content) -> None:
        self.insert(name, content)

    def delete(self, name: str) -> None:
        with self._lock:
            self._assets.pop(name, None)

    def write_to(self, directory: Path) -> List[Path]:
        """Write every asset below *directory*, creating folders as needed."""
        directory = Path(directory)
        with self._lock:
            items = list(self._assets.items())
        written = []
        for name, data in items:
            target = directory / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            written.append(target)
        return written
