"""
Narration audio decoding and playback sinks.

The speech capability returns raw little-endian signed 16-bit mono PCM at
24 kHz. ``decode_pcm16`` turns it into float samples in [-1, 1) and a sink
plays (or writes) the resulting waveform. ``play`` resolves only when playback
has finished, which is what the per-panel ``is_playing_audio`` flag tracks.
"""

import asyncio
import struct
import wave
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

from storyforge.core.constants import NARRATION_SAMPLE_RATE, PCM16_SCALE
from storyforge.core.logging_config import get_logger
from storyforge.utils.file_utils import ensure_directory, safe_filename

logger = get_logger("storyboard.narration")


@dataclass
class Waveform:
    """Mono float waveform."""
    samples: List[float] = field(default_factory=list)
    sample_rate: int = NARRATION_SAMPLE_RATE
    label: str = ""

    @property
    def duration_seconds(self) -> float:
        return len(self.samples) / self.sample_rate if self.sample_rate else 0.0

    def to_pcm16(self) -> bytes:
        """Re-encode as little-endian int16, clamping to the valid range."""
        ints = [max(-32768, min(32767, int(round(s * PCM16_SCALE)))) for s in self.samples]
        return struct.pack(f"<{len(ints)}h", *ints)


def decode_pcm16(raw: bytes) -> List[float]:
    """Decode little-endian int16 PCM into floats (sample / 32768).

    A trailing odd byte cannot form a sample and is ignored.
    """
    count = len(raw) // 2
    ints = struct.unpack(f"<{count}h", raw[:count * 2])
    return [value / PCM16_SCALE for value in ints]


def build_waveform(raw: bytes, sample_rate: int = NARRATION_SAMPLE_RATE, label: str = "") -> Waveform:
    return Waveform(samples=decode_pcm16(raw), sample_rate=sample_rate, label=label)


@runtime_checkable
class AudioSink(Protocol):
    """Anything that can play a waveform to completion."""

    async def play(self, waveform: Waveform) -> None:
        ...


class NullAudioSink:
    """Discards audio; optionally simulates real-time playback duration."""

    def __init__(self, realtime: bool = False):
        self.realtime = realtime
        self.played: List[Waveform] = []

    async def play(self, waveform: Waveform) -> None:
        self.played.append(waveform)
        if self.realtime:
            await asyncio.sleep(waveform.duration_seconds)


class WavFileSink:
    """Writes each waveform to a 16-bit mono WAV file in ``directory``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.last_path: Optional[Path] = None

    async def play(self, waveform: Waveform) -> None:
        ensure_directory(self.directory)
        name = safe_filename(waveform.label or "narration")
        path = self.directory / f"{name}.wav"
        await asyncio.to_thread(self._write, path, waveform)
        self.last_path = path
        logger.info(f"Narration written to {path} ({waveform.duration_seconds:.1f}s)")

    @staticmethod
    def _write(path: Path, waveform: Waveform) -> None:
        with wave.open(str(path), "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(2)
            wav.setframerate(waveform.sample_rate)
            wav.writeframes(waveform.to_pcm16())
