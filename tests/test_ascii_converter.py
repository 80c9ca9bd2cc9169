import sys
import unittest
from pathlib import Path

import cv2
import numpy as np

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from ansi_colors import RESET
from ascii_converter import (
    MAX_FRAME_COUNT,
    ColorMode,
    RenderConfig,
    VideoInfo,
    VideoOpenError,
    build_render_config,
    frame_interval_ms,
    load_frames,
    open_video,
    plan_dimensions,
    process_frame_direct,
    read_video_info,
    transcode_frame,
)
from charsets import brightness_to_glyph
from fake_capture import FakeCapture


def solid_frame(value, height=48, width=64):
    return np.full((height, width, 3), value, dtype=np.uint8)


class PlanDimensionsTests(unittest.TestCase):
    def test_auto_width_saturates_at_max(self):
        self.assertEqual(plan_dimensions(1920, 1080, 60, 0), (60, 200))

    def test_auto_width_within_bounds(self):
        self.assertEqual(plan_dimensions(1920, 1080, 20, 0), (20, 71))
        self.assertEqual(plan_dimensions(1000, 1000, 30, None), (30, 60))

    def test_narrow_source_clamps_to_min_width(self):
        self.assertEqual(plan_dimensions(100, 1000, 20, 0), (20, 40))

    def test_explicit_width_is_kept(self):
        self.assertEqual(plan_dimensions(1920, 1080, 60, 80), (60, 80))

    def test_height_is_clamped(self):
        self.assertEqual(plan_dimensions(640, 480, 500, 100), (120, 100))
        self.assertEqual(plan_dimensions(640, 480, 5, 100), (20, 100))


class FrameIntervalTests(unittest.TestCase):
    def test_explicit_framerate_wins(self):
        self.assertAlmostEqual(frame_interval_ms(60.0, 30), 1000 / 30)

    def test_reported_fps(self):
        self.assertEqual(frame_interval_ms(25.0), 40.0)

    def test_non_positive_fps_falls_back_to_default(self):
        self.assertAlmostEqual(frame_interval_ms(0.0), 1000 / 30)
        self.assertAlmostEqual(frame_interval_ms(-5.0), 1000 / 30)

    def test_build_render_config(self):
        info = VideoInfo(width=1920.0, height=1080.0, fps=24.0, frame_count=None)
        config = build_render_config(info, ColorMode.ANSI, 60, 0)
        self.assertEqual(config, RenderConfig(ColorMode.ANSI, 60, 200, 1000 / 24))


class TranscodeTests(unittest.TestCase):
    def test_mono_gradient(self):
        image = np.array([[0, 128, 255]], dtype=np.uint8)
        self.assertEqual(transcode_frame(image, 1, 3, ColorMode.NONE), "@+ \n")

    def test_mono_grid_shape(self):
        image = np.zeros((20, 40), dtype=np.uint8)
        text = transcode_frame(image, 20, 40, ColorMode.NONE)
        self.assertTrue(text.endswith("\n"))
        rows = text.splitlines()
        self.assertEqual(len(rows), 20)
        self.assertTrue(all(row == "@" * 40 for row in rows))

    def test_ansi_pixel(self):
        image = np.array([[[0, 0, 255]]], dtype=np.uint8)
        self.assertEqual(transcode_frame(image, 1, 1, ColorMode.ANSI), "\x1b[31m*\x1b[0m\n")

    def test_ansi_white_pixel_does_not_overflow(self):
        image = np.array([[[255, 255, 255]]], dtype=np.uint8)
        self.assertEqual(transcode_frame(image, 1, 1, ColorMode.ANSI), "\x1b[97m \x1b[0m\n")

    def test_full_pixel(self):
        image = np.array([[[30, 20, 10]]], dtype=np.uint8)
        self.assertEqual(transcode_frame(image, 1, 1, ColorMode.FULL), "\x1b[38;2;10;20;30m@\x1b[0m\n")

    def test_color_grid_shape(self):
        rng = np.random.default_rng(7)
        image = rng.integers(0, 256, size=(20, 40, 3), dtype=np.uint8)
        for mode in (ColorMode.ANSI, ColorMode.FULL):
            rows = transcode_frame(image, 20, 40, mode).splitlines()
            self.assertEqual(len(rows), 20)
            self.assertTrue(all(row.count(RESET) == 40 for row in rows))


class ProcessFrameTests(unittest.TestCase):
    def test_resizes_to_config(self):
        rng = np.random.default_rng(3)
        frame = rng.integers(0, 256, size=(90, 160, 3), dtype=np.uint8)
        config = RenderConfig(ColorMode.NONE, 20, 40, 40.0)
        rows = process_frame_direct(frame, config).splitlines()
        self.assertEqual(len(rows), 20)
        self.assertTrue(all(len(row) == 40 for row in rows))

        config = config._replace(color_mode=ColorMode.ANSI)
        rows = process_frame_direct(frame, config).splitlines()
        self.assertEqual(len(rows), 20)
        self.assertTrue(all(row.count(RESET) == 40 for row in rows))

    def test_solid_gray_frame(self):
        config = RenderConfig(ColorMode.NONE, 20, 40, 40.0)
        text = process_frame_direct(solid_frame(255), config)
        self.assertEqual(text, (" " * 40 + "\n") * 20)


class LoadFramesTests(unittest.TestCase):
    values = [0, 60, 120, 180, 255]

    def expected(self):
        return [(brightness_to_glyph(v) * 40 + "\n") * 20 for v in self.values]

    def test_frames_in_source_order(self):
        cap = FakeCapture([solid_frame(v) for v in self.values])
        config = RenderConfig(ColorMode.NONE, 20, 40, 40.0)
        self.assertEqual(load_frames(cap, config), self.expected())

    def test_thread_pool_preserves_order(self):
        cap = FakeCapture([solid_frame(v) for v in self.values])
        config = RenderConfig(ColorMode.NONE, 20, 40, 40.0)
        self.assertEqual(load_frames(cap, config, workers=3, batch_size=2), self.expected())

    def test_empty_video(self):
        config = RenderConfig(ColorMode.FULL, 20, 40, 40.0)
        self.assertEqual(load_frames(FakeCapture([]), config), [])


class VideoSourceTests(unittest.TestCase):
    def test_read_video_info(self):
        info = read_video_info(FakeCapture([], width=1280, height=720, fps=29.97, frame_count=300))
        self.assertEqual(info.width, 1280)
        self.assertEqual(info.height, 720)
        self.assertAlmostEqual(info.fps, 29.97)
        self.assertEqual(info.frame_count, 300)

    def test_unusable_frame_counts_are_dropped(self):
        self.assertIsNone(read_video_info(FakeCapture([], frame_count=0)).frame_count)
        self.assertIsNone(read_video_info(FakeCapture([], frame_count=MAX_FRAME_COUNT)).frame_count)

    def test_missing_dimensions(self):
        with self.assertRaises(VideoOpenError):
            read_video_info(FakeCapture([], width=0, height=0))

    def test_open_missing_file(self):
        with self.assertRaises(VideoOpenError):
            open_video(str(ROOT / "tests" / "no_such_video.mp4"))


if __name__ == "__main__":
    unittest.main()
