from __future__ import annotations
import base64
import io
import logging
import os
import secrets
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import DecodeFailure, TransientResourceFailure
from .models import DisplayHandle, RawFile, SelectionItem, VIDEO_PLAYBACK
from .tasks import start_job

log = logging.getLogger(__name__)

MEDIA_ROUTE = "/media"

Scheduler = Callable[[Callable[[], Any], Callable[[Any, Optional[BaseException]], None]], Any]
# (generation, index, uri, error)
Completion = Callable[[int, int, Optional[str], Optional[BaseException]], bool]


class ResourceRegistry:
    """Revocable tokens pointing at the bytes behind video previews."""

    def __init__(self):
        self._live: Dict[str, RawFile] = {}
        self._lock = threading.Lock()
        self.created = 0
        self.released = 0

    def mint(self, raw: RawFile) -> str:
        if not os.path.isfile(raw.path):
            raise TransientResourceFailure(f"{raw.name}: source bytes are gone")
        token = secrets.token_urlsafe(12)
        with self._lock:
            self._live[token] = raw
            self.created += 1
        log.debug("minted %s for %s", token, raw.name)
        return token

    def resolve(self, token: str) -> Optional[RawFile]:
        with self._lock:
            return self._live.get(token)

    def revoke(self, token: str) -> bool:
        with self._lock:
            if self._live.pop(token, None) is None:
                return False
            self.released += 1
        log.debug("revoked %s", token)
        return True

    @property
    def live(self) -> int:
        with self._lock:
            return len(self._live)


def decode_inline(raw: RawFile, max_px: int = 480) -> str:
    """Read an image and return it as a ``data:`` URI, shrunk to ``max_px``."""
    try:
        with Image.open(raw.path) as img:
            img = ImageOps.exif_transpose(img)
            img.thumbnail((max_px, max_px))
            has_alpha = img.mode in ("RGBA", "LA", "P")
            buf = io.BytesIO()
            if has_alpha:
                img.convert("RGBA").save(buf, format="PNG")
                mime = "image/png"
            else:
                img.convert("RGB").save(buf, format="JPEG", quality=85)
                mime = "image/jpeg"
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeFailure(f"{raw.name}: {e}") from e
    return f"data:{mime};base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def error_placeholder(handle: DisplayHandle, err: BaseException) -> DisplayHandle:
    return handle.model_copy(update={
        "status": "error",
        "uri": "",
        "label": f"Preview unavailable: {handle.name}",
        "error": str(err),
    })


class PreviewRenderer:
    def __init__(self, registry: ResourceRegistry, scheduler: Scheduler | None = None, max_px: int = 480):
        self.registry = registry
        self.schedule = scheduler or start_job
        self.max_px = max_px

    def render(self, items: Sequence[SelectionItem]) -> List[DisplayHandle]:
        """One placeholder per item, in input order.

        Video references are minted here; image decodes are only marked
        pending and must be started with :meth:`decode` once the caller has
        stored the placeholders.
        """
        out: List[DisplayHandle] = []
        for item in items:
            base = DisplayHandle(index=item.index, name=item.name, media_kind=item.media_kind, label=item.name)
            if item.media_kind == "image":
                out.append(base.model_copy(update={"kind": "inlineData", "status": "pending"}))
            elif item.media_kind == "video":
                h = base.model_copy(update={"kind": "transientResourceURL", "playback": dict(VIDEO_PLAYBACK)})
                try:
                    token = self.registry.mint(item.raw)
                except TransientResourceFailure as e:
                    log.warning("video preview failed: %s", e)
                    out.append(error_placeholder(h, e))
                    continue
                out.append(h.model_copy(update={"token": token, "uri": f"{MEDIA_ROUTE}/{token}"}))
            else:
                out.append(base)
        return out

    def decode(self, items: Sequence[SelectionItem], generation: int, on_complete: Completion) -> int:
        started = 0
        for item in items:
            if item.media_kind != "image":
                continue

            def job(raw=item.raw):
                return decode_inline(raw, self.max_px)

            def done(uri, err, index=item.index):
                on_complete(generation, index, uri, err)

            self.schedule(job, done)
            started += 1
        return started

    def teardown(self, handles: Sequence[DisplayHandle]) -> int:
        released = 0
        for h in handles:
            if h.kind == "transientResourceURL" and h.token and self.registry.revoke(h.token):
                released += 1
        return released
