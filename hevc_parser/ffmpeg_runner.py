"""
FFmpeg command execution with timeouts and progress monitoring
"""

import logging
import re
import signal
import subprocess
import threading
import time
from datetime import timedelta

logger = logging.getLogger(__name__)

# Exit codes reported for runs we ended ourselves
TIMEOUT_EXIT_CODE = 124
INTERRUPTED_EXIT_CODE = 130

# Seconds a process gets to exit after SIGTERM before it is killed
TERMINATE_GRACE = 5

# Global state for signal handling
current_ffmpeg_process = None
interrupted = False


class ProgressMonitor:
    """Tracks `-progress pipe:2` output and redraws a one-line status"""

    REDRAW_INTERVAL = 0.5
    BAR_WIDTH = 30

    def __init__(self, duration_seconds=None):
        self.duration = duration_seconds
        self.current_time = 0
        self.fps = 0
        self.speed = ""
        self.progress_percent = 0
        self.start_time = time.time()
        self.last_update = 0

    def parse_progress_line(self, line):
        """Parse one progress key=value line or a classic stats line.

        Returns True when the line moved the current position.
        """
        line = line.strip()
        if line.startswith('out_time_us='):
            try:
                self._set_position(int(line.split('=', 1)[1]) / 1_000_000)
                return True
            except ValueError:
                # ffmpeg writes N/A before the first frame
                return False

        time_match = re.search(r'time=(\d{2}):(\d{2}):(\d{2})\.(\d{2})', line)
        if time_match:
            hours, minutes, seconds, centis = (int(g) for g in time_match.groups())
            self._set_position(hours * 3600 + minutes * 60 + seconds + centis / 100)
            return True

        fps_match = re.search(r'fps=\s*(\d+\.?\d*)', line)
        if fps_match:
            self.fps = float(fps_match.group(1))
        speed_match = re.search(r'speed=\s*([0-9.]+x)', line)
        if speed_match:
            self.speed = speed_match.group(1)
        return False

    def _set_position(self, seconds):
        self.current_time = seconds
        if self.duration and self.duration > 0:
            self.progress_percent = min(100, seconds / self.duration * 100)

    def get_eta_string(self):
        """Estimated time remaining as H:MM:SS"""
        elapsed = time.time() - self.start_time
        if not self.duration or self.current_time <= 0 or elapsed <= 0:
            return "??:??:??"
        remaining = elapsed * self.duration / self.current_time - elapsed
        return str(timedelta(seconds=int(max(0, remaining))))

    def get_progress_line(self):
        filled = int(self.BAR_WIDTH * self.progress_percent / 100)
        bar = '█' * filled + '░' * (self.BAR_WIDTH - filled)

        position = str(timedelta(seconds=int(self.current_time)))
        if self.duration:
            position += f"/{timedelta(seconds=int(self.duration))}"
        fps = f"{self.fps:.1f}fps" if self.fps > 0 else "?.?fps"

        return (f"\r[{bar}] {self.progress_percent:5.1f}% | {position} | "
                f"ETA: {self.get_eta_string()} | {self.speed or '?.??x'} | {fps}")

    def update_display(self):
        now = time.time()
        if now - self.last_update >= self.REDRAW_INTERVAL:
            print(self.get_progress_line(), end='', flush=True)
            self.last_update = now


def terminate_process(p):
    """Stop a child process: SIGTERM first, SIGKILL if it does not exit"""
    if p is None or p.poll() is not None:
        return
    p.terminate()
    try:
        p.wait(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        logger.warning("Process %s ignored SIGTERM, killing it", p.pid)
        p.kill()
        p.wait()


def signal_handler(signum, frame):
    """Handle Ctrl+C and SIGTERM: stop the running ffmpeg and flag the sweep"""
    global interrupted

    logger.warning("Interrupt received (signal %s)", signum)
    interrupted = True
    terminate_process(current_ffmpeg_process)


def setup_signal_handlers():
    """Set up signal handlers for graceful interruption"""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def is_interrupted():
    return interrupted


def run(cmd, cwd=None, timeout=None, capture=True, show_progress=False, duration=None):
    """Execute a command and return (exit_code, stdout, stderr).

    capture=False lets the child write straight to our terminal and returns
    empty output strings. show_progress reads stderr line by line and draws a
    progress bar while still capturing everything. A run that exceeds
    `timeout` seconds is terminated and reported as TIMEOUT_EXIT_CODE.
    """
    global current_ffmpeg_process

    if interrupted:
        return INTERRUPTED_EXIT_CODE, "", "Process interrupted"

    # Ensure command list contains strings for Windows compatibility
    cmd_str = [str(c) for c in cmd]
    logger.debug("Running (cwd=%s, timeout=%s): %s", cwd, timeout, ' '.join(cmd_str))

    pipe = subprocess.PIPE if capture or show_progress else None
    p = subprocess.Popen(cmd_str, cwd=cwd, stdout=pipe, stderr=pipe, text=True,
                         encoding='utf-8', errors='replace')
    current_ffmpeg_process = p

    try:
        if show_progress:
            code, out, err, timed_out = _run_with_progress(p, timeout, duration)
        else:
            code, out, err, timed_out = _run_plain(p, timeout)
    finally:
        # Never leave the child running when we bail out
        terminate_process(p)
        current_ffmpeg_process = None

    if timed_out:
        logger.warning("Command timed out after %s seconds: %s", timeout, cmd_str[0])
        return TIMEOUT_EXIT_CODE, out, err + f"\nTimed out after {timeout} seconds"
    if interrupted:
        return INTERRUPTED_EXIT_CODE, out, err

    return code, out, err


def _run_plain(p, timeout):
    try:
        out, err = p.communicate(timeout=timeout)
        timed_out = False
    except subprocess.TimeoutExpired:
        terminate_process(p)
        out, err = p.communicate()
        timed_out = True
    return p.returncode, out or '', err or '', timed_out


def _run_with_progress(p, timeout, duration):
    progress = ProgressMonitor(duration)
    stderr_lines = []
    expired = threading.Event()

    def on_timeout():
        expired.set()
        terminate_process(p)

    timer = threading.Timer(timeout, on_timeout) if timeout else None
    if timer:
        timer.daemon = True
        timer.start()

    try:
        # stdout is drained on a thread so a chatty child cannot block on it
        stdout_chunks = []
        reader = threading.Thread(target=lambda: stdout_chunks.append(p.stdout.read()), daemon=True)
        reader.start()

        for stderr_line in iter(p.stderr.readline, ''):
            stderr_lines.append(stderr_line)
            if progress.parse_progress_line(stderr_line):
                progress.update_display()
            if interrupted:
                break

        p.wait()
        reader.join()
    finally:
        if timer:
            timer.cancel()

    if not interrupted and not expired.is_set():
        progress.progress_percent = 100
        print(progress.get_progress_line())

    return p.returncode, ''.join(stdout_chunks), ''.join(stderr_lines), expired.is_set()


def run_simple(cmd, cwd=None, timeout=None):
    """Run a short command and capture both streams"""
    return run(cmd, cwd=cwd, timeout=timeout, capture=True)
