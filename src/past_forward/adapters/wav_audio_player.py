"""Audio player that drops narration into WAV files."""

import logging
import wave
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from past_forward.services.narration import AudioBuffer, AudioPlayer, encode_pcm

logger = logging.getLogger(__name__)


@dataclass
class WavFileAudioPlayer(AudioPlayer):
    """Writes each played buffer to ``output_dir`` for a local player to pick up."""

    output_dir: Path

    def play(self, buffer: AudioBuffer, label: str) -> None:
        """Write the buffer as a 16-bit WAV file."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%S%f")
        path = self.output_dir / f"narration-{label}-{stamp}.wav"
        with wave.open(str(path), "wb") as handle:
            handle.setnchannels(buffer.channels)
            handle.setsampwidth(2)
            handle.setframerate(buffer.sample_rate)
            handle.writeframes(encode_pcm(buffer))
        logger.info(
            "Narration ready",
            extra={"path": str(path), "seconds": round(buffer.duration_seconds, 2)},
        )
