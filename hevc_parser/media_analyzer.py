"""
Media inspection and the re-encode decision
"""

import logging
import re
from pathlib import Path

from .errors import ProbeFailure
from .ffmpeg_runner import run_simple, TIMEOUT_EXIT_CODE
from .file_utils import format_file_size
from .models import FileCandidate

logger = logging.getLogger(__name__)

MB_TO_BYTES = 1024 * 1024

# Files at or below this size are never worth re-encoding
MIN_TRANSCODE_SIZE = 20 * MB_TO_BYTES

PROBE_TIMEOUT = 60

TARGET_CODEC_MARKER = 'video: hevc'
TARGET_EXTENSION = '.mp4'
PRIVACY_MARKER = 'creation_time'


def probe_media(path: Path) -> str:
    """Return ffmpeg's textual report for a file.

    `ffmpeg -i <file>` without an output always exits non-zero and writes the
    report to stderr, so the exit code is ignored and both streams are used.
    """
    code, out, err = run_simple(['ffmpeg', '-hide_banner', '-i', str(path)],
                                cwd=str(path.parent), timeout=PROBE_TIMEOUT)
    if code == TIMEOUT_EXIT_CODE:
        raise ProbeFailure(f'Probing {path} timed out')

    report = '\n'.join(part for part in (out, err) if part)
    if 'Input #' not in report:
        last_line = report.strip().splitlines()[-1] if report.strip() else 'no output'
        raise ProbeFailure(f'ffmpeg could not read {path}: {last_line}')
    return report


def inspect_candidate(path: Path) -> FileCandidate:
    """Read size and extension fresh from disk"""
    return FileCandidate(path=path, size_bytes=path.stat().st_size, extension=path.suffix)


def parse_duration(report: str):
    """Duration in seconds from the "Duration: HH:MM:SS.cc" line, if any"""
    match = re.search(r'Duration:\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)', report or '')
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def should_transcode(path: Path, report: str, file_size: int, extension: str) -> bool:
    """Decide whether a file needs re-encoding to HEVC/MP4.

    Small files are always left alone. Larger files are converted when they are
    not HEVC, not MP4, or carry a creation_time tag.
    """
    text = (report or '').lower()
    large_enough = file_size > MIN_TRANSCODE_SIZE
    not_target_codec = TARGET_CODEC_MARKER not in text
    not_target_container = (extension or '').lower() != TARGET_EXTENSION
    has_privacy_metadata = PRIVACY_MARKER in text

    if not large_enough:
        logger.info("%s should not be parsed, because it's too small: %s. Minimum size is %s",
                    path, format_file_size(file_size), format_file_size(MIN_TRANSCODE_SIZE))
    elif not_target_codec:
        logger.info("%s should be parsed, because it is not HEVC", path)
    elif not_target_container:
        logger.info("%s should be parsed, because it is not MP4", path)
    elif has_privacy_metadata:
        logger.info("%s should be parsed, because it contains privacy metadata (creation_time)", path)
    else:
        logger.info("%s should not be parsed, because it is compliant", path)

    return large_enough and (not_target_codec or not_target_container or has_privacy_metadata)
