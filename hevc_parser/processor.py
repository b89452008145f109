"""
Sweep driver: per-file decision and transcode, run sequentially over a tree
"""

import logging
from datetime import datetime
from pathlib import Path

from .encoder_prober import select_encoder
from .errors import DisposalFailure, ProbeFailure, TranscodeFailure
from .ffmpeg_builder import target_path_for
from .ffmpeg_runner import is_interrupted
from .file_utils import is_in_trash, is_video_file
from .media_analyzer import inspect_candidate, parse_duration, probe_media, should_transcode
from .models import EncoderChoice, SweepStats, TranscodeConfig
from .rich_console import rich_output
from .transcoder import transcode

logger = logging.getLogger(__name__)


def collect_video_files(root: Path):
    """Collect all video files below root, skipping trash folders"""
    return [
        p for p in root.rglob('*')
        if is_video_file(p) and p.is_file() and not is_in_trash(p, root)
    ]


def process_file(src: Path, config: TranscodeConfig, encoder: EncoderChoice):
    """Process a single video file.

    Returns (result, outcome); outcome is only set for converted files.
    """
    candidate = inspect_candidate(src)
    rich_output.print_file_path(src, candidate.size_bytes)

    try:
        report = probe_media(src)
    except ProbeFailure as e:
        logger.warning("Skipping %s: %s", src, e)
        rich_output.print_skipped(f"Could not read media info: {e}")
        return 'probe_failed', None

    if not should_transcode(src, report, candidate.size_bytes, candidate.extension):
        rich_output.print_skipped("No conversion needed")
        return 'skipped', None

    target = target_path_for(src)
    if config.dry_run:
        logger.info("%s Running in dry run mode. Skip parsing...", src)
        rich_output.print_info(f"DRY-RUN: would convert to {target.name}")
        return 'planned', None

    rich_output.print_processing_start(target.name)
    try:
        outcome = transcode(src, target, src.parent, encoder, config.quality, config.disposal,
                            duration=parse_duration(report))
    except TranscodeFailure as e:
        if is_interrupted():
            rich_output.print_interrupted()
            return 'interrupted', None
        logger.error("Transcode failed for %s, output %s discarded: %s", src, e.target, e)
        rich_output.print_error("Conversion failed, original kept", str(e))
        return 'error', None
    except DisposalFailure as e:
        logger.error("Disposal failed for %s: %s", e.source, e)
        rich_output.print_disposal_error(str(e))
        return 'disposal_error', None

    rich_output.print_savings(outcome.source_size, outcome.target_size)
    rich_output.print_success(f"Converted: {target.name}")
    return 'processed', outcome


def run_sweep(root: Path, config: TranscodeConfig) -> SweepStats:
    """Probe the encoder once and process every video file under root"""
    stats = SweepStats(start_time=datetime.now())

    encoder = select_encoder(config.use_hardware)
    rich_output.print_encoder(encoder, config.use_hardware)

    files = collect_video_files(root)
    stats.total_files = len(files)
    logger.debug("Found %d video files under %s", len(files), root)

    for file_path in files:
        if is_interrupted():
            rich_output.print_interrupted()
            break

        try:
            result, outcome = process_file(file_path, config, encoder)
        except OSError as e:
            # The file vanished or became unreadable between listing and processing
            logger.error("Error processing %s: %s", file_path, e)
            rich_output.print_error(f"Error processing {file_path}", str(e))
            result, outcome = 'error', None

        if outcome is not None:
            stats.bytes_before += outcome.source_size
            stats.bytes_after += outcome.target_size
        stats.add_result(result)

        if result == 'interrupted':
            break

    stats.end_time = datetime.now()
    return stats
