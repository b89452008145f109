"""
Pydantic models for configuration, probing results and sweep statistics
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DisposalAction(Enum):
    """What happens to the original after a verified transcode"""
    NOTHING = "Nothing"
    DELETE = "Delete"
    MOVE_TO_TRASH = "MoveToTrash"


class EncoderChoice(Enum):
    """Selected video encoder; the value is the ffmpeg encoder name"""
    APPLE_HW = "hevc_videotoolbox"
    INTEL_HW = "hevc_qsv"
    NVIDIA_HW = "hevc_nvenc"
    AMD_HW = "hevc_amf"
    SOFTWARE_CPU = "libx265"

    @property
    def is_hardware(self) -> bool:
        return self is not EncoderChoice.SOFTWARE_CPU


class TranscodeConfig(BaseModel):
    """Configuration for one sweep"""
    model_config = ConfigDict(frozen=True)

    use_hardware: bool = False
    quality: int = Field(default=20, ge=0, le=51)
    dry_run: bool = False
    disposal: DisposalAction = DisposalAction.MOVE_TO_TRASH


class FileCandidate(BaseModel):
    """A video file as seen on disk at decision time"""
    path: Path
    size_bytes: int
    extension: str

    @field_validator('size_bytes')
    @classmethod
    def validate_size(cls, v):
        if v < 0:
            raise ValueError('File size must be non-negative')
        return v

    @field_validator('extension')
    @classmethod
    def normalize_extension(cls, v):
        return v.lower()


class TranscodeOutcome(BaseModel):
    """Result of a single ffmpeg transcode invocation"""
    exit_code: int
    stdout: str = ''
    stderr: str = ''
    target_path: Path
    target_size: Optional[int] = None
    source_size: int = 0

    @property
    def target_exists(self) -> bool:
        return self.target_size is not None

    @property
    def saved_bytes(self) -> int:
        return self.source_size - (self.target_size or 0)


class SweepStats(BaseModel):
    """Statistics for one sweep over a directory tree"""
    total_files: int = 0
    processed_files: int = 0
    converted_files: int = 0
    planned_files: int = 0
    skipped_files: int = 0
    error_files: int = 0
    disposal_errors: int = 0
    interrupted_files: int = 0
    bytes_before: int = 0
    bytes_after: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def processing_duration(self) -> Optional[float]:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    @property
    def saved_bytes(self) -> int:
        return self.bytes_before - self.bytes_after

    @property
    def has_failures(self) -> bool:
        return self.error_files > 0 or self.disposal_errors > 0

    def add_result(self, result: str):
        """Add a per-file processing result to the statistics"""
        if result == 'processed':
            self.converted_files += 1
        elif result == 'planned':
            self.planned_files += 1
        elif result in ('skipped', 'probe_failed'):
            self.skipped_files += 1
        elif result == 'disposal_error':
            self.disposal_errors += 1
        elif result == 'interrupted':
            self.interrupted_files += 1
        else:
            self.error_files += 1

        self.processed_files += 1
