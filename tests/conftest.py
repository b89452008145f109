"""
pytest configuration and fixtures for hevc parser tests

Video files are sparse placeholders of a given size; ffmpeg is mocked at the
module-level `run` / `run_simple` imports unless a test asks for check_ffmpeg.
"""

import pytest
import subprocess
import sys
from pathlib import Path

# Add the project root to path for importing
sys.path.insert(0, str(Path(__file__).parent.parent))
from hevc_parser import ffmpeg_runner

MB = 1024 * 1024

HEVC_MP4_REPORT = """Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':
  Metadata:
    major_brand     : isom
    encoder         : Lavf60.16.100
  Duration: 00:01:30.00, start: 0.000000, bitrate: 2200 kb/s
  Stream #0:0[0x1](und): Video: hevc (Main) (hev1 / 0x31766568), yuv420p(tv), 1920x1080, 2000 kb/s, 30 fps
  Stream #0:1[0x2](und): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 192 kb/s
At least one output file must be specified
"""

H264_AVI_REPORT = """Input #0, avi, from 'holiday.avi':
  Duration: 00:02:00.00, start: 0.000000, bitrate: 1800 kb/s
  Stream #0:0: Video: h264 (High) (H264 / 0x34363248), yuv420p, 1280x720, 1600 kb/s, 25 fps
  Stream #0:1: Audio: mp3 (U[0][0][0] / 0x55), 44100 Hz, stereo, fltp, 192 kb/s
At least one output file must be specified
"""

HEVC_WITH_CREATION_TIME_REPORT = """Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'phone.mp4':
  Metadata:
    major_brand     : qt
    creation_time   : 2023-07-14T09:12:44.000000Z
    com.apple.quicktime.location.ISO6709: +52.5200+013.4050+034.000/
  Duration: 00:00:45.10, start: 0.000000, bitrate: 9000 kb/s
  Stream #0:0[0x1](und): Video: hevc (Main) (hvc1 / 0x31637668), yuv420p(tv, bt709), 1920x1080, 8800 kb/s, 30 fps
At least one output file must be specified
"""

TRANSCODE_STDERR = """frame=2700
fps=88.10
out_time_us=90000000
speed=2.93x
progress=end
"""


@pytest.fixture(autouse=True)
def reset_interrupt_flag():
    """Each test starts with no pending interrupt"""
    ffmpeg_runner.interrupted = False
    yield
    ffmpeg_runner.interrupted = False


@pytest.fixture(scope="session")
def check_ffmpeg():
    """Check if ffmpeg is available before running tests"""
    try:
        subprocess.run(['ffmpeg', '-version'], capture_output=True, check=True)
    except (subprocess.CalledProcessError, FileNotFoundError):
        pytest.skip("ffmpeg not available")


@pytest.fixture
def make_video(tmp_path):
    """Create a sparse placeholder video of the given size"""
    def _make_video(name: str, size_bytes: int, folder: Path = None) -> Path:
        folder = folder or tmp_path
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / name
        with open(path, 'wb') as f:
            f.truncate(size_bytes)
        return path

    return _make_video


@pytest.fixture
def fake_transcode():
    """Side effect for a mocked `run` that writes the output ffmpeg would write"""
    def _fake_transcode(size_bytes=10 * MB, exit_code=0, stderr=TRANSCODE_STDERR):
        calls = []

        def side_effect(cmd, *args, **kwargs):
            calls.append(list(cmd))
            target = Path(cmd[-1])
            if size_bytes is not None:
                with open(target, 'wb') as f:
                    f.truncate(size_bytes)
            return exit_code, '', stderr

        side_effect.calls = calls
        return side_effect

    return _fake_transcode


@pytest.fixture
def run_converter():
    """Fixture to run the command line tool in a subprocess"""
    def _run_converter(args: list, expect_error: bool = False):
        script_path = Path(__file__).parent.parent / 'main.py'
        cmd = [sys.executable, str(script_path)] + args
        result = subprocess.run(cmd, capture_output=True, text=True)

        if not expect_error and result.returncode != 0:
            pytest.fail(f"Converter failed: {result.stderr}")

        return result

    return _run_converter
