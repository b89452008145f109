"""
Exception types raised by the transcode pipeline

ProbeFailure and EncoderProbeFailure are recovered locally (skip the file or
fall back to the software encoder). TranscodeFailure is recovered per file.
DisposalFailure means a valid replacement exists next to an original that
could not be removed, and needs operator attention.
"""


class ParserError(Exception):
    """Base class for all pipeline errors"""
    pass


class ProbeFailure(ParserError):
    """ffmpeg could not produce a usable media report for a file"""
    pass


class EncoderProbeFailure(ParserError):
    """Listing or smoke-testing the available encoders failed"""
    pass


class TranscodeFailure(ParserError):
    """A transcode ran but its result did not pass validation"""

    def __init__(self, message, target=None):
        super().__init__(message)
        self.target = target


class DisposalFailure(ParserError):
    """The source could not be deleted or moved after a verified transcode"""

    def __init__(self, message, source=None):
        super().__init__(message)
        self.source = source
