from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from functools import partial

import cv2
import numpy as np

from ansi_colors import CATEGORY_ESCAPES, RESET, classify_ansi, true_color_escape
from charsets import glyphs_for

DEFAULT_TARGET_HEIGHT = 60
DEFAULT_TARGET_WIDTH = 0  # auto, derived from the source aspect ratio
MIN_HEIGHT = 20
MAX_HEIGHT = 120
MIN_WIDTH = 40
MAX_WIDTH = 200

DEFAULT_FRAMERATE = 30
MIN_FRAMERATE = 1
MAX_FRAMERATE = 120
MAX_FRAME_COUNT = 100000

# terminal cells are roughly twice as tall as they are wide
CHAR_ASPECT = 0.5

DEFAULT_BATCH_SIZE = 64
PROGRESS_EVERY = 100


class ColorMode(Enum):
    NONE = "none"
    ANSI = "ansi"
    FULL = "full"


class VideoOpenError(Exception):
    pass


RenderConfig = namedtuple("RenderConfig", ["color_mode", "height", "width", "interval_ms"])
VideoInfo = namedtuple("VideoInfo", ["width", "height", "fps", "frame_count"])


def clamp(value, low, high):
    return max(low, min(high, value))


def open_video(video_path):
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        cap.release()
        raise VideoOpenError(f"Cannot open video file: {video_path}")
    return cap


def read_video_info(cap):
    video_width = cap.get(cv2.CAP_PROP_FRAME_WIDTH)
    video_height = cap.get(cv2.CAP_PROP_FRAME_HEIGHT)
    if video_width <= 0 or video_height <= 0:
        raise VideoOpenError("Video reports no frame dimensions")
    # corrupt containers can report absurd counts
    frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
    if frame_count <= 0 or frame_count >= MAX_FRAME_COUNT:
        frame_count = None
    return VideoInfo(
        width=video_width,
        height=video_height,
        fps=cap.get(cv2.CAP_PROP_FPS),
        frame_count=frame_count,
    )


def plan_dimensions(video_width, video_height, target_height, target_width=DEFAULT_TARGET_WIDTH):
    """
    Work out the character grid for a source of video_width x video_height.

    When target_width is unset (None or <= 0) it is derived from the source
    aspect ratio, corrected for CHAR_ASPECT. Both sides are clamped afterwards,
    so extreme aspect ratios saturate at the bounds instead of failing.
    Returns (height, width).
    """
    video_aspect = video_width / video_height
    if target_width is None or target_width <= 0:
        target_width = int(round(target_height * video_aspect / CHAR_ASPECT))
    height = clamp(target_height, MIN_HEIGHT, MAX_HEIGHT)
    width = clamp(target_width, MIN_WIDTH, MAX_WIDTH)
    return height, width


def frame_interval_ms(reported_fps, framerate=None):
    if framerate is not None:
        return 1000.0 / framerate
    fps = reported_fps
    if not fps or fps <= 0:
        fps = DEFAULT_FRAMERATE
    return 1000.0 / fps


def build_render_config(info, color_mode=ColorMode.NONE, target_height=DEFAULT_TARGET_HEIGHT,
                        target_width=DEFAULT_TARGET_WIDTH, framerate=None):
    height, width = plan_dimensions(info.width, info.height, target_height, target_width)
    return RenderConfig(
        color_mode=color_mode,
        height=height,
        width=width,
        interval_ms=frame_interval_ms(info.fps, framerate),
    )


def prepare_frame(frame, height, width, color_mode):
    if color_mode is ColorMode.NONE:
        frame = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    return cv2.resize(frame, (width, height), interpolation=cv2.INTER_AREA)


def _join_rows(cells):
    return "".join("".join(row) + "\n" for row in cells)


def _split_channels(image):
    wide = image.astype(np.int32)
    b, g, r = wide[..., 0], wide[..., 1], wide[..., 2]
    brightness = np.clip((r + g + b) // 3, 0, 255)
    return r, g, b, brightness


def _render_mono(image):
    return _join_rows(glyphs_for(np.clip(image, 0, 255)))


def _render_ansi(image):
    r, g, b, brightness = _split_channels(image)
    escapes = CATEGORY_ESCAPES[classify_ansi(r, g, b, brightness)]
    return _join_rows(escapes + glyphs_for(brightness) + RESET)


def _render_full(image):
    r, g, b, brightness = _split_channels(image)
    glyphs = glyphs_for(brightness)
    rows = []
    for y in range(image.shape[0]):
        cells = zip(r[y].tolist(), g[y].tolist(), b[y].tolist(), glyphs[y])
        rows.append("".join(true_color_escape(red, green, blue) + glyph + RESET
                            for red, green, blue, glyph in cells))
    return "".join(row + "\n" for row in rows)


_RENDERERS = {
    ColorMode.NONE: _render_mono,
    ColorMode.ANSI: _render_ansi,
    ColorMode.FULL: _render_full,
}


def transcode_frame(image, height, width, color_mode):
    """
    Render an image that is already height x width into one text frame.

    NONE expects a single-channel brightness image; ANSI and FULL expect a
    BGR image as produced by OpenCV.
    """
    return _RENDERERS[color_mode](image[:height, :width])


def process_frame_direct(frame, config):
    prepared = prepare_frame(frame, config.height, config.width, config.color_mode)
    return transcode_frame(prepared, config.height, config.width, config.color_mode)


def _report_progress(done, expected_frames):
    if expected_frames:
        print(f"Processed {done}/{expected_frames} frames")
    else:
        print(f"Processed {done} frames")


def _read_batch(cap, batch_size):
    batch = []
    while len(batch) < batch_size:
        ret, frame = cap.read()
        if not ret:
            break
        batch.append(frame)
    return batch


def load_frames(cap, config, expected_frames=None, workers=1, batch_size=DEFAULT_BATCH_SIZE):
    """
    Decode every remaining frame of cap and render it with config.

    Frames are returned in source order. With workers > 1 each batch is
    rendered on a thread pool; executor.map keeps the batch order.
    """
    render = partial(process_frame_direct, config=config)
    ascii_frames = []
    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        while True:
            batch = _read_batch(cap, batch_size)
            if not batch:
                break
            before = len(ascii_frames)
            if executor is not None:
                ascii_frames.extend(executor.map(render, batch))
            else:
                ascii_frames.extend(render(frame) for frame in batch)
            done = len(ascii_frames)
            if done // PROGRESS_EVERY > before // PROGRESS_EVERY:
                _report_progress(done, expected_frames)
            if len(batch) < batch_size:
                break
    finally:
        if executor is not None:
            executor.shutdown()
    return ascii_frames
