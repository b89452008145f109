"""
File handling utilities and path operations
"""

from pathlib import Path

# Video file extensions picked up by a sweep
VIDEO_EXTS = {'.mkv', '.mp4', '.m4v', '.mov', '.avi', '.wmv', '.flv', '.ts', '.m2ts', '.webm'}

# Hidden folder next to each source that MoveToTrash disposes into
TRASH_DIR_NAME = '.trash'


def format_file_size(size_bytes):
    """Convert bytes to human readable format"""
    negative = size_bytes < 0
    size_bytes = abs(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            break
        size_bytes /= 1024.0
    else:
        unit = 'TB'
    return f"{'-' if negative else ''}{size_bytes:.1f} {unit}"


def is_video_file(path: Path) -> bool:
    return path.suffix.lower() in VIDEO_EXTS


def is_in_trash(path: Path, root: Path) -> bool:
    """True if any folder between root and path is a trash folder"""
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    return TRASH_DIR_NAME in relative.parts[:-1]
