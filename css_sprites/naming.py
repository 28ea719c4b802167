"""Content-addressed file names built from ``[placeholder]`` templates."""

import hashlib
import posixpath
import re
from typing import Optional

_PLACEHOLDER = re.compile(r"\[(contenthash|hash|name|ext)(?::(\d+))?\]")


def interpolate_name(template: str, content: bytes, resource_path: Optional[str] = None) -> str:
    """Fill *template* for *content*.

    ``[contenthash]`` / ``[hash]`` become the md5 hex digest of *content*,
    optionally truncated (``[contenthash:6]``). ``[name]`` and ``[ext]``
    come from *resource_path* and fall back to ``file`` / ``bin``.
    """
    digest = hashlib.md5(content).hexdigest()

    stem, ext = "file", "bin"
    if resource_path:
        base = posixpath.basename(resource_path.replace("\\", "/"))
        root, dot_ext = posixpath.splitext(base)
        stem = root or stem
        ext = dot_ext.lstrip(".") or ext

    def substitute(match):
        key, length = match.group(1), match.group(2)
        if key in ("contenthash", "hash"):
            return digest[: int(length)] if length else digest
        if key == "name":
            return stem
        return ext

    return _PLACEHOLDER.sub(substitute, template)
