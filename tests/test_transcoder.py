"""
Test transcode command building, result validation and the source guarantee
"""

import pytest
from pathlib import Path
from unittest.mock import patch

from hevc_parser import (
    DisposalAction, EncoderChoice, TranscodeFailure, TranscodeOutcome,
    build_ffmpeg_cmd, target_path_for, transcode, validate_outcome,
)
from hevc_parser.ffmpeg_runner import TIMEOUT_EXIT_CODE
from hevc_parser.transcoder import TRANSCODE_TIMEOUT, MIN_OUTPUT_SIZE

from conftest import MB, TRANSCODE_STDERR


class TestBuildCommand:
    """Test ffmpeg argument construction"""

    def test_target_name(self, tmp_path):
        assert target_path_for(tmp_path / 'holiday.avi') == tmp_path / 'holiday_265.mp4'
        assert target_path_for(tmp_path / 'clip.mp4') == tmp_path / 'clip_265.mp4'

    def test_audio_copied_and_metadata_stripped(self, tmp_path):
        cmd = build_ffmpeg_cmd(tmp_path / 'in.mkv', tmp_path / 'in_265.mp4', EncoderChoice.SOFTWARE_CPU, 20)

        assert cmd[0] == 'ffmpeg'
        assert cmd[cmd.index('-i') + 1] == str(tmp_path / 'in.mkv')
        assert cmd[cmd.index('-c:a') + 1] == 'copy'
        assert cmd[cmd.index('-map_metadata') + 1] == '-1'
        assert cmd[cmd.index('-c:v') + 1] == 'libx265'
        assert cmd[-1] == str(tmp_path / 'in_265.mp4')

    @pytest.mark.parametrize("encoder", list(EncoderChoice))
    def test_each_encoder_gets_its_own_codec(self, tmp_path, encoder):
        cmd = build_ffmpeg_cmd(tmp_path / 'a.avi', tmp_path / 'a_265.mp4', encoder, 30)
        assert cmd[cmd.index('-c:v') + 1] == encoder.value
        assert '30' in cmd or encoder == EncoderChoice.APPLE_HW


def make_outcome(target: Path, **overrides):
    values = dict(exit_code=0, stdout='', stderr=TRANSCODE_STDERR, target_path=target,
                  target_size=10 * MB, source_size=25 * MB)
    values.update(overrides)
    return TranscodeOutcome(**values)


class TestValidateOutcome:
    """All four post-conditions have to hold"""

    def test_valid_outcome(self, tmp_path):
        validate_outcome(make_outcome(tmp_path / 'a_265.mp4'))

    def test_x265_encoded_marker_is_accepted(self, tmp_path):
        validate_outcome(make_outcome(tmp_path / 'a_265.mp4',
                                      stderr='x265 [info]: encoded 2700 frames in 92.11s (29.31 fps)'))

    @pytest.mark.parametrize("overrides,message", [
        (dict(exit_code=1), 'exited with 1'),
        (dict(exit_code=TIMEOUT_EXIT_CODE), 'timed out'),
        (dict(target_size=None), 'not found'),
        (dict(target_size=MIN_OUTPUT_SIZE), 'only'),
        (dict(target_size=1024), 'only'),
        (dict(stderr='Conversion failed!'), 'did not report'),
        # a progress block cut off before the final record
        (dict(stderr='frame=1200\nout_time_us=40000000\nspeed=2.93x\nprogress=continue\n'), 'did not report'),
    ])
    def test_invalid_outcomes(self, tmp_path, overrides, message):
        with pytest.raises(TranscodeFailure, match=message):
            validate_outcome(make_outcome(tmp_path / 'a_265.mp4', **overrides))


class TestTranscode:
    """Test the transcode run itself with ffmpeg mocked"""

    def test_success_deletes_source(self, make_video, fake_transcode):
        src = make_video('holiday.avi', 25 * MB)
        target = target_path_for(src)

        with patch('hevc_parser.transcoder.run', side_effect=fake_transcode()) as mock_run:
            outcome = transcode(src, target, src.parent, EncoderChoice.SOFTWARE_CPU, 20, DisposalAction.DELETE)

        assert not src.exists()
        assert target.exists()
        assert outcome.target_size == 10 * MB
        assert outcome.saved_bytes == 15 * MB

        kwargs = mock_run.call_args[1]
        assert kwargs['timeout'] == TRANSCODE_TIMEOUT
        assert kwargs['cwd'] == str(src.parent)

    def test_long_timeout(self):
        assert TRANSCODE_TIMEOUT >= 60 * 60

    def test_existing_target_is_removed_first(self, make_video):
        src = make_video('clip.mkv', 25 * MB)
        target = target_path_for(src)
        target.write_text('stale output from an earlier run')
        seen = {}

        def side_effect(cmd, *args, **kwargs):
            seen['target_existed'] = target.exists()
            with open(target, 'wb') as f:
                f.truncate(8 * MB)
            return 0, '', TRANSCODE_STDERR

        with patch('hevc_parser.transcoder.run', side_effect=side_effect):
            transcode(src, target, src.parent, EncoderChoice.SOFTWARE_CPU, 20, DisposalAction.NOTHING)

        assert seen['target_existed'] is False
        assert target.stat().st_size == 8 * MB

    @pytest.mark.parametrize("fake_args", [
        dict(exit_code=1),
        dict(exit_code=TIMEOUT_EXIT_CODE),
        dict(size_bytes=512 * 1024),
        dict(size_bytes=None),
        dict(stderr='[hevc_nvenc] OpenEncodeSessionEx failed: out of memory'),
    ])
    def test_failure_keeps_source(self, make_video, fake_transcode, fake_args):
        src = make_video('holiday.avi', 25 * MB)
        target = target_path_for(src)

        with patch('hevc_parser.transcoder.run', side_effect=fake_transcode(**fake_args)):
            with pytest.raises(TranscodeFailure):
                transcode(src, target, src.parent, EncoderChoice.SOFTWARE_CPU, 20, DisposalAction.DELETE)

        assert src.exists()
        assert src.stat().st_size == 25 * MB
        assert not (src.parent / '.trash').exists()

    def test_failure_removes_partial_output(self, make_video, fake_transcode):
        src = make_video('holiday.avi', 25 * MB)
        target = target_path_for(src)

        with patch('hevc_parser.transcoder.run', side_effect=fake_transcode(exit_code=1)):
            with pytest.raises(TranscodeFailure):
                transcode(src, target, src.parent, EncoderChoice.SOFTWARE_CPU, 20, DisposalAction.MOVE_TO_TRASH)

        assert not target.exists()

    def test_selected_encoder_is_used(self, make_video, fake_transcode):
        src = make_video('clip.mov', 30 * MB)
        fake = fake_transcode()

        with patch('hevc_parser.transcoder.run', side_effect=fake):
            transcode(src, target_path_for(src), src.parent, EncoderChoice.NVIDIA_HW, 24, DisposalAction.NOTHING)

        cmd = fake.calls[0]
        assert cmd[cmd.index('-c:v') + 1] == 'hevc_nvenc'
        assert cmd[cmd.index('-cq:v') + 1] == '24'
        assert src.exists()
