"""
Hardware encoder detection and encoder-specific parameters
"""

import logging
import re

from .errors import EncoderProbeFailure
from .ffmpeg_runner import run_simple
from .models import EncoderChoice

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 30

# Capability flags column of `ffmpeg -encoders`, e.g. "V....D" or "A..X.."
ENCODER_LINE = re.compile(r'^\s*[VAS][A-Z.]{5}\s+(\S+)(?:\s|$)')

# Evaluated in order; the first listed (and, if flagged, smoke-tested)
# encoder wins. Everything else falls back to libx265.
ENCODER_PRIORITY = [
    (EncoderChoice.APPLE_HW, False),
    (EncoderChoice.INTEL_HW, True),
    (EncoderChoice.NVIDIA_HW, False),
    (EncoderChoice.AMD_HW, False),
]


def parse_encoder_names(output):
    """Return encoder names from `ffmpeg -encoders` output.

    Header text, the flag legend ("V..... = Video"), the "------" separator and
    blank lines do not match and are skipped.
    """
    names = []
    for line in (output or '').splitlines():
        match = ENCODER_LINE.match(line)
        if match and match.group(1) != '=':
            names.append(match.group(1))
    return names


def list_encoders():
    """Ask ffmpeg which encoders it was built with"""
    try:
        code, out, err = run_simple(['ffmpeg', '-hide_banner', '-encoders'], timeout=PROBE_TIMEOUT)
    except OSError as e:
        raise EncoderProbeFailure(f'Could not start ffmpeg: {e}') from e
    if code != 0:
        raise EncoderProbeFailure(f'ffmpeg -encoders exited with {code}: {err.strip()}')

    names = parse_encoder_names(out)
    if not names:
        raise EncoderProbeFailure('ffmpeg -encoders listed no encoders')
    return set(names)


def smoke_test_encoder(encoder: EncoderChoice) -> bool:
    """Encode one second of a synthetic test pattern to the null muxer"""
    cmd = [
        'ffmpeg', '-hide_banner', '-loglevel', 'error',
        '-f', 'lavfi', '-i', 'testsrc=duration=1:size=320x240:rate=30',
        '-c:v', encoder.value,
        '-f', 'null', '-'
    ]
    try:
        code, _, err = run_simple(cmd, timeout=PROBE_TIMEOUT)
    except OSError as e:
        logger.info("Smoke test for %s could not start ffmpeg: %s", encoder.value, e)
        return False
    if code != 0:
        logger.info("Smoke test for %s failed (exit %s): %s", encoder.value, code, err.strip())
        return False
    return True


def select_encoder(use_hardware: bool) -> EncoderChoice:
    """Pick the video encoder used for a whole sweep.

    Without use_hardware no process is started. Any probing problem falls back
    to the software encoder.
    """
    if not use_hardware:
        return EncoderChoice.SOFTWARE_CPU

    try:
        available = list_encoders()
    except EncoderProbeFailure as e:
        logger.warning("Encoder detection failed, using software encoder: %s", e)
        return EncoderChoice.SOFTWARE_CPU

    for choice, needs_smoke_test in ENCODER_PRIORITY:
        if choice.value not in available:
            continue
        if needs_smoke_test and not smoke_test_encoder(choice):
            logger.info("%s is listed but not usable, trying next encoder", choice.value)
            continue
        logger.info("Selected hardware encoder %s", choice.value)
        return choice

    logger.info("No usable hardware encoder found, using software encoder")
    return EncoderChoice.SOFTWARE_CPU


def get_encoder_params(encoder: EncoderChoice, quality: int):
    """Video codec arguments for an encoder at the given CRF-style quality"""
    if encoder == EncoderChoice.APPLE_HW:
        # VideoToolbox takes 0-100, higher = better
        vt_quality = max(0, min(100, 100 - (quality * 2)))
        return ['-c:v', 'hevc_videotoolbox', '-q:v', str(vt_quality), '-tag:v', 'hvc1']

    if encoder == EncoderChoice.INTEL_HW:
        return ['-c:v', 'hevc_qsv', '-preset', 'slow', '-global_quality', str(quality)]

    if encoder == EncoderChoice.NVIDIA_HW:
        return ['-c:v', 'hevc_nvenc', '-preset', 'slow', '-rc:v', 'vbr',
                '-cq:v', str(quality), '-rc-lookahead', '10']

    if encoder == EncoderChoice.AMD_HW:
        return ['-c:v', 'hevc_amf', '-quality', 'quality', '-rc', 'cqp',
                '-qp_i', str(quality), '-qp_p', str(quality)]

    return ['-c:v', 'libx265', '-preset', 'slow', '-crf', str(quality)]
