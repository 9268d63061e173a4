"""
Frame Player - DMX chase playback over sACN

Loads DMX frames from a CSV file (one frame per row, one slot per column) and
plays them through a SACNSender at a fixed frame rate on a background thread.
"""

import csv
import threading
import time
from typing import Callable, List, Optional, Sequence

from .errors import SACNError
from .packet_builder import MAX_SLOTS
from .sender import Destination, SACNSender


def load_frames_csv(path: str) -> List[List[int]]:
    """
    Load DMX frames from a CSV file.

    Blank cells are 0, rows longer than 512 slots are truncated and empty
    rows are skipped.

    Raises:
        ValueError: if the file holds no frames or a cell is not an integer
    """
    frames = []
    with open(path, 'r', newline='') as f:
        reader = csv.reader(f)
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            frame = [(int(val) if val.strip() else 0) for val in row[:MAX_SLOTS]]
            frames.append(frame)
    if not frames:
        raise ValueError(f"CSV contained no frames: {path}")
    return frames


class FramePlayer:
    """Plays a list of frames on one universe at a fixed rate."""

    def __init__(self, sender: SACNSender, universe: int, frames: Sequence[Sequence[int]],
                 fps: int = 30, destination: Optional[Destination] = None,
                 loop: bool = False, log_callback: Callable[[str], None] = print):
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        if not frames:
            raise ValueError("No frames to play")
        self.sender = sender
        self.universe = universe
        self.frames = list(frames)
        self.fps = fps
        self.destination = destination
        self.loop = loop
        self.log_callback = log_callback

        self.frames_sent = 0
        self.last_error: Optional[Exception] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """
        Start playback on a background thread.

        Returns:
            bool: False if playback was already running
        """
        with self._lock:
            if self.is_running:
                self.log_callback("⚠️ Playback already running, ignoring start")
                return False
            self._stop_event.clear()
            self.frames_sent = 0
            self.last_error = None
            self._thread = threading.Thread(target=self._play, name=f"FramePlayer-{self.universe}", daemon=True)
            self._thread.start()
        return True

    def stop(self, timeout: float = 2.0):
        """Stop playback and wait for the thread to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until playback ends. Returns True if it ended within the timeout."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout=timeout)
        return not thread.is_alive()

    def _play(self):
        frame_delay = 1.0 / self.fps
        total_frames = len(self.frames)
        self.log_callback(f"🎭 Starting playback on universe {self.universe}: {total_frames} frames at {self.fps} FPS")
        next_time = time.monotonic()

        while not self._stop_event.is_set():
            for frame in self.frames:
                if self._stop_event.is_set():
                    break
                try:
                    self.sender.send(self.universe, frame, self.destination)
                except SACNError as e:
                    self.last_error = e
                    self.log_callback(f"❌ Playback stopped on universe {self.universe}: {e}")
                    return
                self.frames_sent += 1

                next_time += frame_delay
                delay = next_time - time.monotonic()
                if delay > 0:
                    self._stop_event.wait(delay)
                else:
                    next_time = time.monotonic()
            if not self.loop:
                break

        self.log_callback(f"✅ Playback finished on universe {self.universe}: {self.frames_sent} frames sent")
