"""
FFmpeg command building for HEVC transcodes
"""

from pathlib import Path

from .encoder_prober import get_encoder_params
from .models import EncoderChoice

TARGET_SUFFIX = '_265'
TARGET_EXTENSION = '.mp4'


def target_path_for(source: Path) -> Path:
    """movie.avi -> movie_265.mp4 in the same folder"""
    return source.parent / f"{source.stem}{TARGET_SUFFIX}{TARGET_EXTENSION}"


def build_ffmpeg_cmd(inp: Path, out: Path, encoder: EncoderChoice, quality: int):
    """Build the transcode command: HEVC video, audio copied, metadata dropped"""
    base = ['ffmpeg', '-y', '-hide_banner', '-loglevel', 'warning', '-progress', 'pipe:2', '-i', str(inp)]

    # Global metadata (creation_time, GPS, ...) is not carried over
    cmd = base + ['-map_metadata', '-1', '-c:a', 'copy']
    cmd.extend(get_encoder_params(encoder, quality))
    cmd.extend(['-movflags', '+faststart', str(out)])
    return cmd
