#!/usr/bin/env python3
"""
HEVC parser: re-encode a video library to HEVC/MP4

Walks a folder recursively and converts every video that is larger than 20 MB
and is not HEVC, not MP4, or still carries creation_time metadata:
- Video: HEVC (hardware encoder if requested and usable, libx265 otherwise)
- Audio: copied unchanged
- Metadata: stripped
- Original: moved to .trash, deleted, or kept after a verified conversion

Usage:
  python main.py --path /path/to/folder [options]
  python main.py --path /path/to/folder --dry-run
  python main.py --path /path/to/folder --gpu --crf 24 --action Delete

Requires: ffmpeg in PATH
"""

import argparse
import shutil
import sys
from pathlib import Path

from pydantic import ValidationError

from hevc_parser.ffmpeg_runner import setup_signal_handlers, is_interrupted, INTERRUPTED_EXIT_CODE
from hevc_parser.logging_config import configure_logging
from hevc_parser.models import DisposalAction, TranscodeConfig
from hevc_parser.processor import run_sweep
from hevc_parser.rich_console import rich_output

EXIT_OK = 0
EXIT_FILE_FAILURES = 1
EXIT_USAGE = 2


def parse_arguments(argv=None):
    """Parse command line arguments"""
    ap = argparse.ArgumentParser(description='Convert all video files under a folder to HEVC using FFmpeg.')
    ap.add_argument('--path', '-p', type=Path, required=True, help='Folder to scan recursively')
    ap.add_argument('--dry-run', '-d', action='store_true', help='Only show what would be converted')
    ap.add_argument('--verbose', '-v', action='store_true', help='Show debug logging')
    ap.add_argument('--gpu', '-g', action='store_true',
                    help='Use a hardware encoder (Apple / Intel / NVIDIA / AMD) when one is usable')
    ap.add_argument('--crf', '-c', type=int, default=20,
                    help='Constant Rate Factor, 0-51: 0 is lossless, 51 is worst quality (default: 20)')
    ap.add_argument('--action', '-a', type=str, default=DisposalAction.MOVE_TO_TRASH.value,
                    choices=[a.value for a in DisposalAction],
                    help='What to do with the original after a successful conversion (default: MoveToTrash)')
    return ap.parse_args(argv)


def build_config(args):
    """Turn parsed arguments into a TranscodeConfig, exiting on invalid values"""
    try:
        return TranscodeConfig(
            use_hardware=args.gpu,
            quality=args.crf,
            dry_run=args.dry_run,
            disposal=DisposalAction(args.action),
        )
    except ValidationError as e:
        if any(err['loc'] == ('quality',) for err in e.errors()):
            print('Error: CRF must be between 0 and 51', file=sys.stderr)
        else:
            print(f'Error: invalid options: {e}', file=sys.stderr)
        sys.exit(EXIT_USAGE)


def main(argv=None):
    args = parse_arguments(argv)
    configure_logging(args.verbose)
    config = build_config(args)

    root: Path = args.path.resolve()
    if not root.is_dir():
        print(f'Path does not exist or is not a folder: {root}', file=sys.stderr)
        return EXIT_USAGE

    if shutil.which('ffmpeg') is None:
        print('Error: ffmpeg not found. Please make it available in PATH.', file=sys.stderr)
        return EXIT_USAGE

    setup_signal_handlers()

    rich_output.print_header('HEVC Parser')
    rich_output.print_config(root, config)

    stats = run_sweep(root, config)
    rich_output.print_final_summary(stats)

    if is_interrupted():
        return INTERRUPTED_EXIT_CODE
    return EXIT_FILE_FAILURES if stats.has_failures else EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
