"""
Disposal of source files after a verified transcode
"""

import logging
import secrets
import shutil
from pathlib import Path

from .errors import DisposalFailure
from .file_utils import TRASH_DIR_NAME
from .models import DisposalAction

logger = logging.getLogger(__name__)


def trash_destination(source: Path) -> Path:
    """First free path for source inside its trash folder.

    Collisions get a random token appended to the stem; an existing trashed
    file is never reused.
    """
    trash_dir = source.parent / TRASH_DIR_NAME
    candidate = trash_dir / source.name
    while candidate.exists():
        candidate = trash_dir / f"{source.stem}_{secrets.token_hex(4)}{source.suffix}"
    return candidate


def move_to_trash(source: Path) -> Path:
    """Move source into the hidden .trash folder beside it"""
    trash_dir = source.parent / TRASH_DIR_NAME
    trash_dir.mkdir(exist_ok=True)

    destination = trash_destination(source)
    shutil.move(str(source), str(destination))
    logger.info("Moved %s to %s", source, destination)
    return destination


def dispose_source(source: Path, action: DisposalAction):
    """Apply the configured disposal action to the original file.

    Returns the new location for MoveToTrash, otherwise None.
    """
    try:
        if action == DisposalAction.DELETE:
            source.unlink()
            logger.info("Deleted source %s", source)
        elif action == DisposalAction.MOVE_TO_TRASH:
            return move_to_trash(source)
        else:
            logger.info("Leaving source %s in place", source)
    except OSError as e:
        raise DisposalFailure(f'Could not {action.value} {source}: {e}', source=source) from e
    return None
