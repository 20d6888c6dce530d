from __future__ import annotations
import logging
import threading
from typing import Any, Dict, Optional, Sequence

from .config import Settings
from .errors import EmptyInputError, InvalidPhase
from .export import Mechanism, command_clipboard, copy_text, tk_clipboard
from .models import GeneratedScript, LayoutStrategy, Phase, RawFile, ScriptParameters
from .selection import SelectionManager
from .synth import synthesize

log = logging.getLogger(__name__)


def file_count_label(n: int) -> str:
    return f"{n} file(s) selected" if n else "0 files selected"


class Studio:
    """One user session: ``idle -> selected -> generated -> idle``."""

    def __init__(self, manager: SelectionManager, params: ScriptParameters | None = None,
                 settings: Settings | None = None,
                 clipboard: Mechanism = tk_clipboard, clipboard_fallback: Mechanism = command_clipboard):
        self.manager = manager
        self.settings = settings or Settings()
        self.params = params or ScriptParameters(
            segment_duration=self.settings.default_duration,
            layout=self.settings.default_layout,
        )
        self.script: Optional[GeneratedScript] = None
        self.clipboard = clipboard
        self.clipboard_fallback = clipboard_fallback
        self._lock = threading.RLock()

    @property
    def phase(self) -> Phase:
        with self._lock:
            if self.script is not None:
                return "generated"
            return "selected" if self.manager.state.items else "idle"

    @property
    def copy_enabled(self) -> bool:
        return self.phase == "generated"

    def select(self, files: Sequence[RawFile]) -> None:
        with self._lock:
            self.script = None
            self.manager.replace_selection(files)

    def clear(self) -> None:
        with self._lock:
            self.script = None
            self.manager.clear()

    def generate(self, duration: float | None = None, layout: LayoutStrategy | None = None) -> GeneratedScript:
        with self._lock:
            state = self.manager.snapshot()
            update: Dict[str, Any] = {}
            if duration is not None:
                update["segment_duration"] = duration
            if layout is not None:
                update["layout"] = layout
            # Re-validate overrides instead of trusting model_copy
            params = ScriptParameters.model_validate({**self.params.model_dump(), **update})
            try:
                text = synthesize(state.filenames, params)
            except EmptyInputError:
                self.script = None
                raise
            self.script = GeneratedScript(
                text=text, filenames=state.filenames, params=params, generation=state.generation,
            )
            log.info("generated script for %d file(s) (generation %d, layout %s)",
                     len(state.filenames), state.generation, params.layout)
            return self.script

    def copy(self) -> str:
        with self._lock:
            if self.script is None:
                raise InvalidPhase("Generate a script before copying it.")
            text = self.script.text
        return copy_text(text, primary=self.clipboard, fallback=self.clipboard_fallback)

    def view(self) -> Dict[str, Any]:
        state = self.manager.snapshot()
        return {
            "generation": state.generation,
            "phase": self.phase,
            "copy_enabled": self.copy_enabled,
            "file_count": len(state.items),
            "file_count_label": file_count_label(len(state.items)),
            "pending": state.pending,
            "placeholders": [p.model_dump() for p in state.placeholders],
        }
