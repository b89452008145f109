"""
Checks against a real ffmpeg binary; skipped when ffmpeg is not installed
"""

import subprocess

from hevc_parser import EncoderChoice, probe_media, parse_duration, select_encoder, should_transcode
from hevc_parser.encoder_prober import list_encoders


def make_sample(path, duration=2):
    subprocess.run([
        'ffmpeg', '-y', '-hide_banner', '-loglevel', 'error',
        '-f', 'lavfi', '-i', f'testsrc=duration={duration}:size=320x240:rate=25',
        '-c:v', 'mpeg4', '-metadata', 'creation_time=2021-05-01T10:00:00Z', str(path)
    ], check=True, capture_output=True)


class TestRealFFmpeg:

    def test_probe_report_of_generated_file(self, check_ffmpeg, tmp_path):
        sample = tmp_path / 'sample.mp4'
        make_sample(sample)

        report = probe_media(sample)

        assert 'Input #0' in report
        assert 'Video: mpeg4' in report
        assert parse_duration(report) is not None
        assert should_transcode(sample, report, 25 * 1024 * 1024, '.mp4')

    def test_encoder_listing(self, check_ffmpeg):
        assert len(list_encoders()) > 0

    def test_select_encoder_returns_a_choice(self, check_ffmpeg):
        assert isinstance(select_encoder(True), EncoderChoice)
