from __future__ import annotations
import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .errors import ClassificationAmbiguous
from .models import DisplayHandle, MediaKind, RawFile, SelectionItem
from .preview import PreviewRenderer, ResourceRegistry, error_placeholder

log = logging.getLogger(__name__)


def _media_kind(content_type: Optional[str]) -> MediaKind:
    ct = (content_type or "").strip().lower()
    if not ct or "/" not in ct:
        raise ClassificationAmbiguous(f"unusable content type {content_type!r}")
    major = ct.split("/", 1)[0]
    if major == "image":
        return "image"
    if major == "video":
        return "video"
    return "other"


def classify(index: int, raw: RawFile) -> SelectionItem:
    try:
        kind = _media_kind(raw.content_type)
    except ClassificationAmbiguous as e:
        log.info("%s: %s, treating as other", raw.name, e)
        kind = "other"
    return SelectionItem(index=index, name=raw.name, media_kind=kind, raw=raw)


@dataclass
class SelectionState:
    generation: int = 0
    items: List[SelectionItem] = field(default_factory=list)
    # Previewable subset (image/video), in item order
    handles: List[DisplayHandle] = field(default_factory=list)
    # Everything shown on the surface, one per item
    placeholders: List[DisplayHandle] = field(default_factory=list)

    @property
    def filenames(self) -> List[str]:
        return [it.name for it in self.items]

    @property
    def pending(self) -> int:
        return sum(1 for p in self.placeholders if p.status == "pending")


class SelectionManager:
    """Owns the one SelectionState and every transient reference behind it.

    Each replace bumps ``generation``; decode completions stamped with an
    older generation are dropped without touching the current state.
    """

    def __init__(self, renderer: PreviewRenderer | None = None):
        self.renderer = renderer or PreviewRenderer(ResourceRegistry())
        self.state = SelectionState()
        self._lock = threading.RLock()

    @property
    def registry(self) -> ResourceRegistry:
        return self.renderer.registry

    def replace_selection(self, files: Sequence[RawFile]) -> SelectionState:
        with self._lock:
            released = self._teardown()
            self.state = SelectionState(generation=self.state.generation + 1)
            items = [classify(i, raw) for i, raw in enumerate(files)]
            placeholders = self.renderer.render(items)
            self.state.items = items
            self.state.placeholders = placeholders
            self.state.handles = [h for h in placeholders if h.kind != "none"]
            generation = self.state.generation
            log.info("selection generation %d: %d item(s), released %d stale reference(s)",
                     generation, len(items), released)
            self.renderer.decode(items, generation, self.apply_decode)
            return self.snapshot()

    def clear(self) -> SelectionState:
        return self.replace_selection([])

    def apply_decode(self, generation: int, index: int, uri: Optional[str], error: Optional[BaseException]) -> bool:
        with self._lock:
            if generation != self.state.generation:
                log.debug("discarding decode for item %d of superseded generation %d", index, generation)
                return False
            pos = next((i for i, p in enumerate(self.state.placeholders) if p.index == index), None)
            if pos is None or self.state.placeholders[pos].status != "pending":
                return False
            current = self.state.placeholders[pos]
            if error is not None:
                log.warning("decode failed for %s: %s", current.name, error)
                updated = error_placeholder(current, error)
            else:
                updated = current.model_copy(update={"status": "ready", "uri": uri or ""})
            self.state.placeholders[pos] = updated
            self.state.handles = [updated if h.index == index else h for h in self.state.handles]
            return True

    def snapshot(self) -> SelectionState:
        with self._lock:
            s = self.state
            return SelectionState(
                generation=s.generation,
                items=list(s.items),
                handles=list(s.handles),
                placeholders=list(s.placeholders),
            )

    def _teardown(self) -> int:
        # Must run before a new generation renders
        return self.renderer.teardown(self.state.handles)
