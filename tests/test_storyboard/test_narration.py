"""
Tests for Narration

Tests for storyforge/storyboard/narration.py
"""

import wave
import pytest

from storyforge.storyboard.narration import (
    AudioSink,
    NullAudioSink,
    WavFileSink,
    Waveform,
    build_waveform,
    decode_pcm16,
)


class TestDecodePcm16:
    """Tests for PCM decoding."""

    def test_decodes_little_endian(self):
        samples = decode_pcm16(b"\x00\x00\xff\x7f\x00\x80")

        assert samples == [0.0, 32767 / 32768.0, -1.0]

    def test_odd_trailing_byte_ignored(self):
        assert decode_pcm16(b"\x00\x40\x01") == [0.5]

    def test_empty_input(self):
        assert decode_pcm16(b"") == []

    def test_duration(self):
        waveform = build_waveform(b"\x00\x00" * 24000)

        assert waveform.sample_rate == 24000
        assert waveform.duration_seconds == 1.0


class TestSinks:
    """Tests for audio sinks."""

    def test_sinks_satisfy_protocol(self, temp_dir):
        assert isinstance(NullAudioSink(), AudioSink)
        assert isinstance(WavFileSink(temp_dir), AudioSink)

    @pytest.mark.asyncio
    async def test_null_sink_records(self):
        sink = NullAudioSink()
        waveform = Waveform(samples=[0.0, 0.5])

        await sink.play(waveform)

        assert sink.played == [waveform]

    @pytest.mark.asyncio
    async def test_wav_sink_writes_file(self, temp_dir):
        sink = WavFileSink(temp_dir / "audio")

        await sink.play(build_waveform(b"\x00\x00\x00\x40", label="panel 1"))

        assert sink.last_path.name == "panel_1.wav"
        with wave.open(str(sink.last_path), "rb") as wav:
            assert wav.getnchannels() == 1
            assert wav.getsampwidth() == 2
            assert wav.getframerate() == 24000
            assert wav.readframes(2) == b"\x00\x00\x00\x40"
