import ast

import pytest

from composite_studio.errors import EmptyInputError
from composite_studio.models import ScriptParameters
from composite_studio.synth import py_quote, synthesize


def assignments(text):
    tree = ast.parse(text)
    out = {}
    for node in tree.body:
        if isinstance(node, ast.Assign) and len(node.targets) == 1 and isinstance(node.targets[0], ast.Name):
            try:
                out[node.targets[0].id] = ast.literal_eval(node.value)
            except ValueError:
                continue
    return out


AWKWARD_NAMES = [
    "plain.png",
    'a"b.png',
    "it's.jpg",
    "back\\slash.mp4",
    "two  spaces .mov",
    "line\nbreak.png",
    "tab\there.webp",
    "dollar $HOME `tick`.png",
    "ünïcødé 写真.jpg",
    "trailing space .png ",
    "",
]


def test_filenames_round_trip_through_literal_list():
    text = synthesize(AWKWARD_NAMES)
    assert assignments(text)["source_filenames"] == AWKWARD_NAMES


def test_one_literal_per_filename():
    names = ['x"y.png', "z.png", "z.png"]
    text = synthesize(names)
    tree = ast.parse(text)
    node = next(n for n in tree.body if isinstance(n, ast.Assign) and n.targets[0].id == "source_filenames")
    assert isinstance(node.value, ast.List)
    assert len(node.value.elts) == len(names)
    assert all(isinstance(e, ast.Constant) and isinstance(e.value, str) for e in node.value.elts)


def test_quote_escaping_is_literal():
    text = synthesize(['a"b.png', "c.xyz"])
    assert '"a\\"b.png"' in text
    assert '"c.xyz"' in text


def test_py_quote_examples():
    assert py_quote('a"b') == '"a\\"b"'
    assert py_quote("a\\b") == '"a\\\\b"'
    assert py_quote("a\nb") == '"a\\nb"'
    assert py_quote("\x01") == '"\\x01"'
    assert ast.literal_eval(py_quote("\udcff")) == "\udcff"


def test_empty_input_fails():
    with pytest.raises(EmptyInputError):
        synthesize([])


def test_deterministic():
    p = ScriptParameters(layout="randomScatterNonOverlapping", seed=7)
    assert synthesize(["a.png", "b.mp4"], p) == synthesize(["a.png", "b.mp4"], p)


def test_parameters_embedded_verbatim():
    p = ScriptParameters(
        canvas_width=1280,
        canvas_height=720,
        fps=24,
        segment_duration=4.5,
        min_total_duration=3,
        tile_width=300,
        border=6,
        padding=40,
        cell_gap=12,
        background_color=(1, 2, 3),
        border_color=(250, 251, 252),
        output_filename='out "final".mp4',
        music_filename="song.mp3",
        music_volume=0.5,
        seed=99,
    )
    values = assignments(synthesize(["a.png"], p))
    assert values["TARGET_WIDTH"] == 1280
    assert values["TARGET_HEIGHT"] == 720
    assert values["OUTPUT_FPS"] == 24
    assert values["IMAGE_DURATION_SECONDS"] == 4.5
    assert values["TOTAL_VIDEO_DURATION"] == 4.5
    assert values["CLIP_WIDTH_PX"] == 300
    assert values["CLIP_BORDER_PX"] == 6
    assert values["EDGE_PADDING_PX"] == 40
    assert values["CELL_GAP_PX"] == 12
    assert values["BACKGROUND_COLOR_RGB"] == (1, 2, 3)
    assert values["BORDER_COLOR_RGB"] == (250, 251, 252)
    assert values["OUTPUT_FILENAME"] == 'out "final".mp4'
    assert values["MUSIC_FILENAME"] == "song.mp3"
    assert values["MUSIC_VOLUME"] == 0.5
    assert values["RANDOM_SEED"] == 99


def test_defaults_match_composite_generator():
    values = assignments(synthesize(["a.png"]))
    assert (values["TARGET_WIDTH"], values["TARGET_HEIGHT"], values["OUTPUT_FPS"]) == (1920, 1080, 30)
    assert values["IMAGE_DURATION_SECONDS"] == 7.0
    assert values["TOTAL_VIDEO_DURATION"] == 10.0
    assert values["OUTPUT_FILENAME"] == "composite_output_1080p.mp4"
    assert values["MUSIC_FILENAME"] is None


def test_five_items_give_three_by_two_grid():
    values = assignments(synthesize([f"{i}.png" for i in range(5)]))
    assert (values["GRID_COLS"], values["GRID_ROWS"]) == (3, 2)


def test_row_override_never_emits_empty_rows():
    values = assignments(synthesize(["a.png"], ScriptParameters(grid_rows=10)))
    assert (values["GRID_COLS"], values["GRID_ROWS"]) == (1, 1)


@pytest.mark.parametrize("layout", ["gridStatic", "gridCentered", "randomScatterNonOverlapping", "animatedStaggered"])
def test_every_layout_emits_parseable_script(layout):
    text = synthesize(["a.png", 'b"c.mp4', "d.txt"], ScriptParameters(layout=layout))
    tree = ast.parse(text)
    funcs = {n.name for n in tree.body if isinstance(n, ast.FunctionDef)}
    assert {"cell_origin", "place"} <= funcs
    assert f"# Layout: {layout}" in text


def test_staggered_total_covers_last_start():
    p = ScriptParameters(layout="animatedStaggered", stagger_seconds=2.0, segment_duration=5, min_total_duration=0)
    values = assignments(synthesize([f"{i}.png" for i in range(4)], p))
    assert values["TOTAL_VIDEO_DURATION"] == 11.0


def test_script_cleans_up_and_summarises_in_finally():
    tree = ast.parse(synthesize(["a.png"]))
    tries = [n for n in tree.body if isinstance(n, ast.Try)]
    outer = tries[-1]
    assert outer.finalbody
    final_src = ast.unparse(outer.finalbody)
    assert "close()" in final_src
    assert "gc.collect()" in final_src
    assert "Processing Summary" in final_src
