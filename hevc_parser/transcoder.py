"""
Transcode execution, result validation and source disposal
"""

import logging
from pathlib import Path

from .disposal import dispose_source
from .errors import TranscodeFailure
from .ffmpeg_builder import build_ffmpeg_cmd
from .ffmpeg_runner import run, TIMEOUT_EXIT_CODE
from .file_utils import format_file_size
from .models import DisposalAction, EncoderChoice, TranscodeOutcome

logger = logging.getLogger(__name__)

# Slow presets on large files legitimately take hours
TRANSCODE_TIMEOUT = 200 * 60

# Anything this small is a broken or empty output
MIN_OUTPUT_SIZE = 1024 * 1024

# x265's closing summary, or the final `-progress` record. speed= shows up
# in every intermediate block and does not count.
COMPLETION_MARKERS = ('encoded', 'progress=end')


def validate_outcome(outcome: TranscodeOutcome):
    """Raise TranscodeFailure unless the transcode produced a usable file"""
    if outcome.exit_code == TIMEOUT_EXIT_CODE:
        raise TranscodeFailure(f'ffmpeg timed out writing {outcome.target_path}', target=outcome.target_path)
    if outcome.exit_code != 0:
        raise TranscodeFailure(f'ffmpeg exited with {outcome.exit_code} writing {outcome.target_path}',
                               target=outcome.target_path)
    if not outcome.target_exists:
        raise TranscodeFailure(f'Converted file not found: {outcome.target_path}', target=outcome.target_path)
    if outcome.target_size <= MIN_OUTPUT_SIZE:
        raise TranscodeFailure(f'Converted file is only {format_file_size(outcome.target_size)}: '
                               f'{outcome.target_path}', target=outcome.target_path)

    diagnostics = (outcome.stderr + outcome.stdout).lower()
    if not any(marker in diagnostics for marker in COMPLETION_MARKERS):
        raise TranscodeFailure(f'ffmpeg did not report a finished encode for {outcome.target_path}',
                               target=outcome.target_path)


def _remove_partial(target: Path):
    try:
        if target.exists():
            target.unlink()
            logger.info("Removed partial output %s", target)
    except OSError as e:
        logger.warning("Could not remove partial output %s: %s", target, e)


def transcode(source: Path, target: Path, work_dir: Path, encoder: EncoderChoice, quality: int,
              disposal: DisposalAction, duration=None) -> TranscodeOutcome:
    """Re-encode source into target, verify it, then dispose of source.

    The source is only touched after validate_outcome passed.
    """
    logger.warning("%s parsing initialized with %s, crf is %s", source, encoder.value, quality)

    if target.exists():
        target.unlink()

    cmd = build_ffmpeg_cmd(source, target, encoder, quality)
    code, out, err = run(cmd, cwd=str(work_dir), timeout=TRANSCODE_TIMEOUT,
                         show_progress=True, duration=duration)

    outcome = TranscodeOutcome(
        exit_code=code,
        stdout=out,
        stderr=err,
        target_path=target,
        target_size=target.stat().st_size if target.exists() else None,
        source_size=source.stat().st_size,
    )

    try:
        validate_outcome(outcome)
    except TranscodeFailure:
        _remove_partial(target)
        raise

    logger.info("New file size is %s, source file size is %s. Saved %s",
                format_file_size(outcome.target_size),
                format_file_size(outcome.source_size),
                format_file_size(outcome.saved_bytes))

    dispose_source(source, disposal)
    return outcome
