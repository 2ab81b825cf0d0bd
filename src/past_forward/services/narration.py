"""Decoding of narration audio into playable buffers."""

from dataclasses import dataclass
from typing import Protocol

import numpy as np

PCM_SCALE = 32768.0


@dataclass(frozen=True)
class AudioBuffer:
    """Float samples shaped (frames, channels) in the range [-1.0, 1.0)."""

    samples: np.ndarray
    sample_rate: int

    @property
    def channels(self) -> int:
        return int(self.samples.shape[1])

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate


class AudioPlayer(Protocol):
    """Interface for starting playback of a decoded buffer."""

    def play(self, buffer: AudioBuffer, label: str) -> None:
        """Start playing the buffer."""


def decode_pcm(raw: bytes, sample_rate: int, channels: int) -> AudioBuffer:
    """Decode signed 16-bit little-endian interleaved PCM."""
    if channels < 1:
        raise ValueError("channels must be positive")
    usable = len(raw) - len(raw) % (2 * channels)
    interleaved = np.frombuffer(raw[:usable], dtype="<i2")
    frames = interleaved.reshape(-1, channels).astype(np.float32) / PCM_SCALE
    return AudioBuffer(samples=frames, sample_rate=sample_rate)


def encode_pcm(buffer: AudioBuffer) -> bytes:
    """Encode a buffer back to signed 16-bit little-endian interleaved PCM."""
    scaled = np.clip(buffer.samples * PCM_SCALE, -PCM_SCALE, PCM_SCALE - 1)
    return scaled.astype("<i2").tobytes()
