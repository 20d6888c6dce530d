"""Text of the generated compositing script.

Filled with :class:`string.Template`; every ``${name}`` below is replaced by a
ready-made Python literal, so the emitted script needs no further edits.
"""
from __future__ import annotations
from string import Template
from typing import Dict


HEADER = Template(r'''# Python Script for Google Colab Video Generation (Composite Style)
# Generated by Composite Studio
# Layout: ${layout}
#
# IMPORTANT: Before running, upload the EXACT SAME files listed below
#            to your Colab session's file directory!

# ----------------------------------------
# 1. Setup Environment
# ----------------------------------------
import subprocess
import sys

print("Installing necessary libraries...")
# MoviePy 1.0.3 works best with numpy < 1.24
try:
    import numpy
    print(f"Existing numpy version: {numpy.__version__}")
except ImportError:
    print("Numpy not found, installing.")
    subprocess.run([sys.executable, "-m", "pip", "install", "-q", "numpy==1.23.5"], check=False)

subprocess.run([sys.executable, "-m", "pip", "install", "-q", "moviepy==1.0.3"], check=False)
print("Installation check complete.")
print("-" * 40)

# ----------------------------------------
# 2. Import Libraries
# ----------------------------------------
import gc
import math
import os
import random
import traceback

from moviepy.editor import AudioFileClip, ColorClip, CompositeVideoClip, ImageClip, VideoFileClip
from moviepy.audio.fx.all import audio_loop

print("Libraries imported.")
print("-" * 40)

# ----------------------------------------
# 3. Configuration
# ----------------------------------------
source_filenames = ${filenames}

TARGET_WIDTH = ${canvas_width}
TARGET_HEIGHT = ${canvas_height}
OUTPUT_FPS = ${fps}
IMAGE_DURATION_SECONDS = ${segment_duration}
TOTAL_VIDEO_DURATION = ${total_duration}
CLIP_WIDTH_PX = ${tile_width}
CLIP_BORDER_PX = ${border}
EDGE_PADDING_PX = ${padding}
CELL_GAP_PX = ${cell_gap}
BACKGROUND_COLOR_RGB = ${background_color}
BORDER_COLOR_RGB = ${border_color}
GRID_COLS = ${grid_cols}
GRID_ROWS = ${grid_rows}
RANDOM_SEED = ${seed}
PLACEMENT_ATTEMPTS = ${placement_attempts}
STAGGER_SECONDS = ${stagger_seconds}
DRIFT_PX = ${drift_px}
MUSIC_FILENAME = ${music_filename}
MUSIC_VOLUME = ${music_volume}
OUTPUT_FILENAME = ${output_filename}

# Case-insensitive; GIFs are left out on purpose
IMAGE_EXTENSIONS = [".png", ".jpg", ".jpeg", ".webp", ".bmp"]
VIDEO_EXTENSIONS = [".mp4", ".mov", ".avi", ".mkv", ".webm"]

print("Configuration:")
print(f" - Source Files: {len(source_filenames)} items")
print(f" - Clip Frame Width: {CLIP_WIDTH_PX}px")
print(f" - Clip Border: {CLIP_BORDER_PX}px")
print(f" - Image Duration: {IMAGE_DURATION_SECONDS}s")
print(f" - Total Duration: {TOTAL_VIDEO_DURATION}s")
print(f" - Target Resolution: {TARGET_WIDTH}x{TARGET_HEIGHT}")
print(f" - Output FPS: {OUTPUT_FPS}")
print(f" - Output Filename: {OUTPUT_FILENAME}")
print("-" * 40)

# ----------------------------------------
# 4. Layout
# ----------------------------------------
num_files = len(source_filenames)
available_width = TARGET_WIDTH - 2 * EDGE_PADDING_PX
available_height = TARGET_HEIGHT - 2 * EDGE_PADDING_PX
cell_width = available_width / GRID_COLS
cell_height = available_height / GRID_ROWS

# Room left for the picture once the border and the gap between cells are taken
max_clip_area_width = cell_width - 2 * CLIP_BORDER_PX - CELL_GAP_PX
max_clip_area_height = cell_height - 2 * CLIP_BORDER_PX - CELL_GAP_PX
final_clip_width = max(1, int(min(CLIP_WIDTH_PX, max_clip_area_width)))
final_clip_max_height = max(1, int(max_clip_area_height))
print(f"Calculated grid: {GRID_ROWS} rows x {GRID_COLS} cols")
print(f"Adjusted clip width to fit grid: {final_clip_width}px (max possible: {max_clip_area_width:.0f}px)")


def cell_origin(index):
    row, col = divmod(index, GRID_COLS)
    return EDGE_PADDING_PX + col * cell_width, EDGE_PADDING_PX + row * cell_height

''')


LAYOUTS: Dict[str, str] = {
    "gridStatic": r'''
def place(index, clip):
    # Pinned to the top-left of its cell, inset by half the gap
    x, y = cell_origin(index)
    pos = (int(x + CELL_GAP_PX / 2), int(y + CELL_GAP_PX / 2))
    return clip.set_position(pos), 0
''',
    "gridCentered": r'''
def place(index, clip):
    x, y = cell_origin(index)
    pos = (int(x + (cell_width - clip.w) / 2), int(y + (cell_height - clip.h) / 2))
    return clip.set_position(pos), 0
''',
    "randomScatterNonOverlapping": r'''
rng = random.Random(RANDOM_SEED)
placed_centers = []
min_center_distance = min(final_clip_width, final_clip_max_height)


def place(index, clip):
    # Best effort: a naive center-distance test with a fixed retry budget
    max_x = max(EDGE_PADDING_PX, TARGET_WIDTH - EDGE_PADDING_PX - clip.w)
    max_y = max(EDGE_PADDING_PX, TARGET_HEIGHT - EDGE_PADDING_PX - clip.h)
    spot = None
    for _ in range(PLACEMENT_ATTEMPTS):
        x = rng.uniform(EDGE_PADDING_PX, max_x)
        y = rng.uniform(EDGE_PADDING_PX, max_y)
        cx, cy = x + clip.w / 2, y + clip.h / 2
        if all(math.hypot(cx - px, cy - py) >= min_center_distance for px, py in placed_centers):
            spot = (x, y)
            break
    if spot is None:
        print("  WARNING: no free spot found, placing randomly anyway")
        spot = (rng.uniform(EDGE_PADDING_PX, max_x), rng.uniform(EDGE_PADDING_PX, max_y))
    placed_centers.append((spot[0] + clip.w / 2, spot[1] + clip.h / 2))
    return clip.set_position((int(spot[0]), int(spot[1]))), 0
''',
    "animatedStaggered": r'''
def place(index, clip):
    x, y = cell_origin(index)
    base_x = x + (cell_width - clip.w) / 2
    base_y = y + (cell_height - clip.h) / 2
    phase = index * 0.7

    def drift(t):
        return (int(base_x + DRIFT_PX * math.sin(0.8 * t + phase)),
                int(base_y + DRIFT_PX * math.cos(0.6 * t + phase)))

    clip = clip.crossfadein(min(0.5, IMAGE_DURATION_SECONDS / 2))
    return clip.set_position(drift), index * STAGGER_SECONDS
''',
}


BODY = r'''

# ----------------------------------------
# 5. Processing Logic
# ----------------------------------------
processed_clips_for_composite = []
files_missing = []
files_processed = []
files_failed = []
background_clip = None
final_clip = None
music_source = None
music_clip = None

print("Starting processing for composite video...")

try:
    for filename in source_filenames:
        print(f"Processing: {filename}...")
        if not os.path.exists(filename):
            print(f"  ERROR: File not found in Colab environment: {filename}")
            files_missing.append(filename)
            continue

        clip = None
        try:
            _, ext = os.path.splitext(filename.lower())
            if ext in IMAGE_EXTENSIONS:
                print("  Type: Image")
                clip = ImageClip(filename).set_duration(IMAGE_DURATION_SECONDS)
                clip = clip.resize(width=final_clip_width).set_fps(OUTPUT_FPS)
            elif ext in VIDEO_EXTENSIONS:
                print("  Type: Video")
                clip = VideoFileClip(filename)
                clip = clip.resize(width=final_clip_width)
                if clip.duration > IMAGE_DURATION_SECONDS:
                    print(f"  Trimming video to {IMAGE_DURATION_SECONDS}s")
                    clip = clip.subclip(0, IMAGE_DURATION_SECONDS)
                elif clip.duration < IMAGE_DURATION_SECONDS:
                    print(f"  Looping video to reach {IMAGE_DURATION_SECONDS}s")
                    clip = clip.loop(duration=IMAGE_DURATION_SECONDS)
                if clip.fps is None:
                    clip = clip.set_fps(OUTPUT_FPS)
            else:
                print(f"  WARNING: Unsupported file type: {filename} - Skipping")
                files_failed.append(f"{filename} (Unsupported type)")
                continue

            if clip.h > final_clip_max_height:
                clip = clip.resize(height=final_clip_max_height)

            print(f"  Adding border: {CLIP_BORDER_PX}px")
            clip = clip.margin(mar=CLIP_BORDER_PX, color=BORDER_COLOR_RGB)

            clip, start = place(len(processed_clips_for_composite), clip)
            clip = clip.set_start(start).set_duration(IMAGE_DURATION_SECONDS)
            print(f"  Assigned position {clip.pos(0)}, start {start}s")

            processed_clips_for_composite.append(clip)
            files_processed.append(filename)
            print(f"  Successfully prepared: {filename}")

        except Exception as e:
            print(f"  ERROR processing file {filename}: {e}")
            print(traceback.format_exc())
            files_failed.append(f"{filename} (Processing error)")
            if clip is not None:
                try:
                    clip.close()
                except Exception as e_close:
                    print(f"  Error closing failed clip: {e_close}")

    print("-" * 40)

    # ----------------------------------------
    # 6. Create Background and Composite
    # ----------------------------------------
    if not processed_clips_for_composite:
        print("ERROR: No clips were successfully processed. Cannot create video.")
    else:
        print("Creating background clip...")
        background_clip = ColorClip(size=(TARGET_WIDTH, TARGET_HEIGHT),
                                    color=BACKGROUND_COLOR_RGB,
                                    ismask=False,
                                    duration=TOTAL_VIDEO_DURATION)

        print(f"Compositing {len(processed_clips_for_composite)} clips onto background...")
        final_clip = CompositeVideoClip([background_clip] + processed_clips_for_composite,
                                        size=(TARGET_WIDTH, TARGET_HEIGHT))
        final_clip = final_clip.set_duration(TOTAL_VIDEO_DURATION)

        if MUSIC_FILENAME:
            if os.path.exists(MUSIC_FILENAME):
                try:
                    print(f"Mixing music: {MUSIC_FILENAME}")
                    music_source = AudioFileClip(MUSIC_FILENAME)
                    if music_source.duration < TOTAL_VIDEO_DURATION:
                        music_clip = audio_loop(music_source, duration=TOTAL_VIDEO_DURATION)
                    else:
                        music_clip = music_source.subclip(0, TOTAL_VIDEO_DURATION)
                    music_clip = music_clip.volumex(MUSIC_VOLUME)
                    final_clip = final_clip.set_audio(music_clip)
                except Exception as e:
                    print(f"  WARNING: Could not mix music {MUSIC_FILENAME}: {e} - continuing without it")
            else:
                print(f"  WARNING: Music file not found: {MUSIC_FILENAME} - continuing without it")

        print(f"Writing final composite video to: {OUTPUT_FILENAME} (This may take time)...")
        final_clip.write_videofile(
            OUTPUT_FILENAME,
            fps=OUTPUT_FPS,
            codec="libx264",
            audio_codec="aac",
            preset="medium",
            threads=4,
        )
        print("-" * 40)
        print(f"SUCCESS! Composite video saved as {OUTPUT_FILENAME}.")

except Exception as e:
    print(f"ERROR during final compositing or export: {e}")
    print(traceback.format_exc())

finally:
    # Native readers hold file handles and ffmpeg processes; release them on every path
    print("Closing clips and collecting garbage...")
    for res in [final_clip, background_clip, music_clip, music_source] + processed_clips_for_composite:
        if res is None:
            continue
        try:
            res.close()
        except Exception as e_close:
            print(f"Error closing clip: {e_close}")
    processed_clips_for_composite.clear()
    gc.collect()
    print("Cleanup attempted.")

    print("-" * 40)
    print("Script finished.")
    print("\n--- Processing Summary ---")
    print(f"Total files selected: {len(source_filenames)}")
    print(f"Successfully processed: {len(files_processed)}")
    if files_processed:
        print(f"  {files_processed}")
    print(f"Missing files (not found in Colab): {len(files_missing)}")
    if files_missing:
        print(f"  {files_missing}")
    print(f"Failed/Skipped files: {len(files_failed)}")
    if files_failed:
        print(f"  {files_failed}")
    print("--------------------------")
'''
