from __future__ import annotations
import logging
from typing import Optional, Sequence

from .errors import EmptyInputError
from .layout import grid_shape
from .models import RGB, ScriptParameters
from .script_template import BODY, HEADER, LAYOUTS

log = logging.getLogger(__name__)

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def py_quote(value: str) -> str:
    """Double-quoted Python string literal that evaluates back to ``value``."""
    out = []
    for ch in value:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02x}")
        elif 0xD800 <= code <= 0xDFFF:
            # lone surrogates (undecodable bytes) cannot be written as UTF-8
            out.append(f"\\u{code:04x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def py_list(values: Sequence[str]) -> str:
    if not values:
        return "[]"
    return "[\n" + "".join(f"    {py_quote(v)},\n" for v in values) + "]"


def _num(v: float) -> str:
    if isinstance(v, bool):
        raise TypeError("booleans are not script numbers")
    if isinstance(v, int):
        return str(v)
    return repr(float(v))


def _rgb(c: RGB) -> str:
    return "({}, {}, {})".format(*(int(x) for x in c))


def _opt_str(v: Optional[str]) -> str:
    return "None" if v is None else py_quote(v)


def synthesize(filenames: Sequence[str], params: ScriptParameters | None = None) -> str:
    """Render the compositing script for ``filenames``.

    Pure: identical inputs give identical text. Raises ``EmptyInputError``
    for an empty list.
    """
    params = params or ScriptParameters()
    names = list(filenames)
    if not names:
        raise EmptyInputError()
    cols, rows = grid_shape(len(names), params.grid_cols, params.grid_rows)

    header = HEADER.substitute(
        layout=params.layout,
        filenames=py_list(names),
        canvas_width=_num(params.canvas_width),
        canvas_height=_num(params.canvas_height),
        fps=_num(params.fps),
        segment_duration=_num(params.segment_duration),
        total_duration=_num(params.total_duration(len(names))),
        tile_width=_num(params.tile_width),
        border=_num(params.border),
        padding=_num(params.padding),
        cell_gap=_num(params.cell_gap),
        background_color=_rgb(params.background_color),
        border_color=_rgb(params.border_color),
        grid_cols=_num(cols),
        grid_rows=_num(rows),
        seed=_num(params.seed),
        placement_attempts=_num(params.placement_attempts),
        stagger_seconds=_num(params.stagger_seconds),
        drift_px=_num(params.drift_px),
        music_filename=_opt_str(params.music_filename),
        music_volume=_num(params.music_volume),
        output_filename=py_quote(params.output_filename),
    )
    text = header + LAYOUTS[params.layout].lstrip("\n") + BODY
    log.debug("synthesized %d-byte script for %d file(s), %dx%d grid", len(text), len(names), cols, rows)
    return text
