"""WAV packaging for recorded audio."""

import io
import wave
from pathlib import Path

SAMPLE_RATE = 16000
CHANNELS = 1
SAMPLE_WIDTH = 2  # 16-bit PCM


def encode_wav(
    pcm: bytes,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
    sample_width: int = SAMPLE_WIDTH,
) -> bytes:
    """Wrap raw little-endian PCM frames in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()


def load_clip(path: str) -> tuple[bytes, str]:
    """Read an audio file from disk.

    Returns:
        A tuple of (file bytes, file name).

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If the file is empty.
    """
    resolved = Path(path).expanduser()
    data = resolved.read_bytes()
    if not data:
        raise ValueError(f"Audio file '{resolved}' is empty.")
    return data, resolved.name
