"""Tests for narration decoding and playback."""

import wave

import numpy as np
import pytest

from past_forward.adapters.wav_audio_player import WavFileAudioPlayer
from past_forward.services.narration import decode_pcm, encode_pcm


def test_decode_pcm_scales_little_endian_samples() -> None:
    raw = b"\x00\x00\xff\x7f\x00\x80\x00\x40"

    buffer = decode_pcm(raw, sample_rate=24000, channels=1)

    assert buffer.samples.shape == (4, 1)
    np.testing.assert_allclose(
        buffer.samples[:, 0], [0.0, 32767 / 32768, -1.0, 0.5]
    )
    assert buffer.duration_seconds == pytest.approx(4 / 24000)


def test_decode_pcm_deinterleaves_channels_and_drops_partial_frame() -> None:
    raw = b"\x00\x40\x00\xc0\x00\x20\x00\xe0\x01"

    buffer = decode_pcm(raw, sample_rate=16000, channels=2)

    assert buffer.channels == 2
    assert buffer.frame_count == 2
    np.testing.assert_allclose(buffer.samples[0], [0.5, -0.5])
    np.testing.assert_allclose(buffer.samples[1], [0.25, -0.25])


def test_decode_pcm_rejects_zero_channels() -> None:
    with pytest.raises(ValueError):
        decode_pcm(b"\x00\x00", sample_rate=24000, channels=0)


def test_wav_player_writes_playable_file(tmp_path) -> None:
    raw = b"\x00\x00\xff\x7f\x00\x80\x00\x40"
    buffer = decode_pcm(raw, sample_rate=24000, channels=1)

    WavFileAudioPlayer(tmp_path / "audio").play(buffer, "1950s")

    [path] = list((tmp_path / "audio").glob("narration-1950s-*.wav"))
    with wave.open(str(path), "rb") as handle:
        assert handle.getframerate() == 24000
        assert handle.getnchannels() == 1
        assert handle.readframes(handle.getnframes()) == encode_pcm(buffer)
        assert encode_pcm(buffer) == raw
