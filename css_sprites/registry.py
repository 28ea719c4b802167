"""Table of images seen by the ingestion step, keyed by output file name."""

import threading
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class ImageDescriptor:
    file_name: str
    source_path: str
    query: str = ""
    byte_size: int = 0


class ImageRegistry:
    """Build-scoped map of *file name* -> :class:`ImageDescriptor`.

    Populated by ingestion before composition and only read afterwards.
    Registering a name twice replaces the earlier descriptor.
    """

    def __init__(self):
        self._images: Dict[str, ImageDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, file_name: str, descriptor: ImageDescriptor) -> None:
        with self._lock:
            self._images[file_name] = descriptor

    def lookup(self, file_name: str) -> Optional[ImageDescriptor]:
        with self._lock:
            return self._images.get(file_name)

    def __contains__(self, file_name):
        return self.lookup(file_name) is not None

    def __len__(self):
        with self._lock:
            return len(self._images)
