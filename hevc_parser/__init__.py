"""
HEVC parser library modules

Decides which videos need re-encoding, drives ffmpeg and disposes of originals.
"""

# Import all public interfaces for easy access
from .errors import ParserError, ProbeFailure, EncoderProbeFailure, TranscodeFailure, DisposalFailure
from .models import DisposalAction, EncoderChoice, TranscodeConfig, FileCandidate, TranscodeOutcome, SweepStats
from .ffmpeg_runner import run, run_simple, setup_signal_handlers, is_interrupted
from .encoder_prober import select_encoder, parse_encoder_names, get_encoder_params
from .media_analyzer import probe_media, inspect_candidate, should_transcode, parse_duration
from .ffmpeg_builder import build_ffmpeg_cmd, target_path_for
from .transcoder import transcode, validate_outcome
from .disposal import dispose_source, move_to_trash
from .processor import collect_video_files, process_file, run_sweep
from .file_utils import VIDEO_EXTS, format_file_size

__all__ = [
    'ParserError', 'ProbeFailure', 'EncoderProbeFailure', 'TranscodeFailure', 'DisposalFailure',
    'DisposalAction', 'EncoderChoice', 'TranscodeConfig', 'FileCandidate', 'TranscodeOutcome', 'SweepStats',
    'run', 'run_simple', 'setup_signal_handlers', 'is_interrupted',
    'select_encoder', 'parse_encoder_names', 'get_encoder_params',
    'probe_media', 'inspect_candidate', 'should_transcode', 'parse_duration',
    'build_ffmpeg_cmd', 'target_path_for',
    'transcode', 'validate_outcome',
    'dispose_source', 'move_to_trash',
    'collect_video_files', 'process_file', 'run_sweep',
    'VIDEO_EXTS', 'format_file_size'
]
