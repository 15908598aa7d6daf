import io
import wave
from typing import Set
from packages.ivs_core.errors import DeviceUnavailable
from .device import ICaptureDevice, DeviceHandle

def silent_wav(duration_sec: float = 1.0, rate: int = 16000) -> bytes:
    """Mono 16-bit PCM WAV of silence, built in memory."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(rate)
        wf.writeframes(b"\x00\x00" * int(duration_sec * rate))
    return buffer.getvalue()

class MockCaptureDevice(ICaptureDevice):
    """
    In-memory microphone for development and tests.
    Tracks open handles so leaks are observable.
    """
    def __init__(self, available: bool = True, fail_finalize: bool = False, duration_sec: float = 0.5):
        self.available = available
        self.fail_finalize = fail_finalize
        self.duration_sec = duration_sec
        self.open_handles: Set[int] = set()
        self.acquire_count = 0
        self.release_count = 0

    async def acquire(self) -> DeviceHandle:
        if not self.available:
            raise DeviceUnavailable("Microphone access denied")
        handle = DeviceHandle(source="mock")
        self.open_handles.add(handle.id)
        self.acquire_count += 1
        return handle

    async def finalize(self, handle: DeviceHandle) -> bytes:
        if self.fail_finalize:
            raise RuntimeError("Mock Failure: recorder stopped unexpectedly")
        return silent_wav(self.duration_sec)

    async def release(self, handle: DeviceHandle) -> None:
        if handle.id not in self.open_handles:
            raise RuntimeError(f"{handle} released twice")
        self.open_handles.discard(handle.id)
        self.release_count += 1
