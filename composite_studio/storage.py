from __future__ import annotations
import logging
import os
import shutil
import time
import uuid
from typing import Optional

from .models import RawFile

log = logging.getLogger(__name__)


def sanitize_filename(name: str) -> str:
    bad = "\x00\x01\x02\x03\x04\x05\x06\x07\x08\x09\x0a\x0b\x0c\x0d\x0e\x0f\x10\x11\x12\x13\x14\x15\x16\x17\x18\x19\x1a\x1b\x1c\x1d\x1e\x1f<>:\"/\\|?*"
    cleaned = "".join(c for c in name if c not in bad).strip(" .")[:80]
    return cleaned or f"untitled-{int(time.time())}"


class ScratchStore:
    """Uploaded bytes live here, one directory per selection batch."""

    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        os.makedirs(self.root, exist_ok=True)

    def batch_dir(self, batch: str) -> str:
        return os.path.join(self.root, batch)

    def new_batch(self) -> str:
        batch = uuid.uuid4().hex[:12]
        os.makedirs(self.batch_dir(batch), exist_ok=True)
        return batch

    def save(self, batch: str, name: str, content_type: Optional[str], data: bytes) -> RawFile:
        d = self.batch_dir(batch)
        os.makedirs(d, exist_ok=True)
        # Display names may repeat; on-disk names must not
        disk_name = f"{len(os.listdir(d)):04d}_{sanitize_filename(name)}"
        path = os.path.join(d, disk_name)
        with open(path, "wb") as f:
            f.write(data)
        return RawFile(name=name, content_type=content_type, path=path, size=len(data), batch=batch)

    def prune(self, keep: Optional[str] = None) -> int:
        removed = 0
        for name in os.listdir(self.root):
            d = os.path.join(self.root, name)
            if name == keep or not os.path.isdir(d):
                continue
            shutil.rmtree(d, ignore_errors=True)
            removed += 1
        if removed:
            log.debug("pruned %d stale upload batch(es)", removed)
        return removed
