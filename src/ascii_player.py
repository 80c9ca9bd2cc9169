import os
import sys
import time
from enum import Enum

from ansi_colors import CLEAR_SCREEN


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    REACHED_END = "reached_end"


def clear_screen(stream=None):
    stream = stream or sys.stdout
    if os.name == "nt":
        stream.flush()
        os.system("cls")
    else:
        stream.write(CLEAR_SCREEN)
        stream.flush()


class ASCIIVideoPlayer:
    """
    Replays pre-rendered text frames at a fixed interval.

    Each frame is shown by clearing the display, writing the whole frame and
    then sleeping for delay_ms, floored to whole milliseconds. There is no
    looping or frame skipping; playback ends after the last frame.
    """

    def __init__(self, frames, delay_ms, stream=None, clear=clear_screen, sleep=time.sleep):
        self.frames = frames
        self.delay_ms = delay_ms
        self.stream = stream or sys.stdout
        self.clear = clear
        self.sleep = sleep
        self.state = PlaybackState.IDLE
        self.frames_shown = 0

    @property
    def sleep_seconds(self):
        return int(self.delay_ms) / 1000.0

    def play(self):
        if self.frames:
            self.state = PlaybackState.PLAYING
        for frame in self.frames:
            self.clear(self.stream)
            self.stream.write(frame)
            self.stream.flush()
            self.frames_shown += 1
            self.sleep(self.sleep_seconds)
        self.state = PlaybackState.REACHED_END
