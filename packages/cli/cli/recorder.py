"""Microphone capture through PortAudio (install the ``record`` extra)."""

import sounddevice as sd

from cli.audio import CHANNELS, SAMPLE_RATE, encode_wav

MAX_SECONDS = 60.0


def record_clip(seconds: float) -> bytes:
    """Record from the default input device and return a WAV clip.

    Blocks for the duration of the recording.

    Raises:
        ValueError: If the duration is not within (0, MAX_SECONDS].
    """
    if not 0 < seconds <= MAX_SECONDS:
        raise ValueError(f"Recording length must be between 0 and {MAX_SECONDS:g} seconds.")

    frames = int(seconds * SAMPLE_RATE)
    samples = sd.rec(frames, samplerate=SAMPLE_RATE, channels=CHANNELS, dtype="int16")
    sd.wait()
    return encode_wav(samples.tobytes())
