import argparse
import os
import shutil
import sys
import time

from ansi_colors import HIDE_CURSOR, SHOW_CURSOR
from ascii_converter import (
    DEFAULT_TARGET_HEIGHT,
    MAX_FRAMERATE,
    MAX_HEIGHT,
    MAX_WIDTH,
    MIN_FRAMERATE,
    MIN_HEIGHT,
    MIN_WIDTH,
    ColorMode,
    VideoOpenError,
    build_render_config,
    load_frames,
    open_video,
    read_video_info,
)
from ascii_player import ASCIIVideoPlayer, clear_screen


def bounded_int(name, low, high=None):
    def parse(value):
        try:
            number = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid {name} value: {value!r}")
        if number < low or (high is not None and number > high):
            bounds = f"[{low}, {high}]" if high is not None else f">= {low}"
            raise argparse.ArgumentTypeError(f"{name} {number} is out of bounds {bounds}")
        return number
    return parse


def build_parser():
    parser = argparse.ArgumentParser(prog='video2ascii', description='Play a video as ASCII art in the terminal')
    parser.add_argument('video_path', help='Path to the input video file')
    parser.add_argument('--color', choices=[mode.value for mode in ColorMode], default=ColorMode.NONE.value,
                        help='Color mode: none, ansi, full (default: none)')
    parser.add_argument('--height', type=bounded_int('height', MIN_HEIGHT, MAX_HEIGHT), default=DEFAULT_TARGET_HEIGHT,
                        help=f'Target height in chars [{MIN_HEIGHT}, {MAX_HEIGHT}] (default: {DEFAULT_TARGET_HEIGHT})')
    parser.add_argument('--width', type=bounded_int('width', MIN_WIDTH, MAX_WIDTH), default=None,
                        help=f'Target width in chars [{MIN_WIDTH}, {MAX_WIDTH}] (default: auto)')
    parser.add_argument('--framerate', type=bounded_int('framerate', MIN_FRAMERATE, MAX_FRAMERATE), default=None,
                        help=f'Target frames per second [{MIN_FRAMERATE}, {MAX_FRAMERATE}] (default: from video)')
    parser.add_argument('--workers', type=bounded_int('workers', 1), default=1,
                        help='Threads used to convert frames (default: 1)')
    return parser


def warn_terminal_size(width, height):
    term_width, term_height = shutil.get_terminal_size()
    if term_width < width or term_height < height:
        print(f"Warning: Terminal size ({term_width}x{term_height}) is smaller than output size ({width}x{height})")


def play_frames(ascii_frames, interval_ms, stream=None):
    stream = stream or sys.stdout
    player = ASCIIVideoPlayer(ascii_frames, interval_ms, stream=stream)
    stream.write(HIDE_CURSOR)
    try:
        player.play()
    except KeyboardInterrupt:
        clear_screen(stream)
        print("Playback stopped.")
    finally:
        stream.write(SHOW_CURSOR)
        stream.flush()
    return player


def run(args):
    try:
        cap = open_video(args.video_path)
    except VideoOpenError:
        print("Error: Cannot open video file.", file=sys.stderr)
        return 1
    try:
        info = read_video_info(cap)
        config = build_render_config(info, ColorMode(args.color), args.height, args.width, args.framerate)
        frame_count = info.frame_count if info.frame_count is not None else "unknown"
        print(f"Video: {int(info.width)}x{int(info.height)}, FPS: {info.fps:.2f}, Total Frames: {frame_count}")
        print(f"Output: {config.width}x{config.height} chars, color: {config.color_mode.value}, "
              f"frame interval: {config.interval_ms:.2f} ms")
        warn_terminal_size(config.width, config.height)
        start_time = time.time()
        ascii_frames = load_frames(cap, config, expected_frames=info.frame_count, workers=args.workers)
    except VideoOpenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        cap.release()
    print(f"Converted {len(ascii_frames)} frames in {time.time() - start_time:.2f} seconds")
    play_frames(ascii_frames, config.interval_ms)
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not os.path.exists(args.video_path):
        print(f"Error: File '{args.video_path}' not found", file=sys.stderr)
        sys.exit(1)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
