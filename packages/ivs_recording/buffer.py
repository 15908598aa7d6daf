import asyncio
import logging
from enum import Enum
from typing import Optional
from packages.ivs_core.errors import DeviceUnavailable, InvalidAction
from .device import ICaptureDevice, DeviceHandle

logger = logging.getLogger("ivs.recording")

class RecordingState(str, Enum):
    IDLE = "IDLE"
    ACQUIRING = "ACQUIRING"   # Device acquire in flight
    RECORDING = "RECORDING"
    CAPTURED = "CAPTURED"
    CLOSED = "CLOSED"   # Terminal, session teardown only

def format_elapsed(seconds: int) -> str:
    """125 -> '2:05'"""
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes}:{rest:02d}"

class RecordingBuffer:
    """
    Owns the single in-progress capture for the displayed question.

    IDLE -> ACQUIRING -> RECORDING -> CAPTURED -> IDLE. Calling begin() again from
    CAPTURED discards the previous artifact. At most one device handle is held at any time.
    """
    def __init__(self, device: ICaptureDevice, tick_seconds: float = 1.0):
        self.device = device
        self.tick_seconds = tick_seconds
        self.state = RecordingState.IDLE
        self.artifact: Optional[bytes] = None
        self.elapsed_seconds = 0
        self._handle: Optional[DeviceHandle] = None
        self._timer: Optional[asyncio.Task] = None

    @property
    def is_recording(self) -> bool:
        return self.state in (RecordingState.ACQUIRING, RecordingState.RECORDING)

    async def begin(self):
        if self.state == RecordingState.CLOSED:
            raise InvalidAction("Recorder is closed")
        if self.state == RecordingState.ACQUIRING:
            raise InvalidAction("A capture is already starting")

        # Never hold two handles: tear down an active capture first
        if self.state == RecordingState.RECORDING:
            logger.warning("begin() while recording; tearing down the active capture")
            await self._teardown()

        previous_state = self.state
        self.state = RecordingState.ACQUIRING
        try:
            handle = await self.device.acquire()
        except DeviceUnavailable:
            self._abort_acquire(previous_state)
            raise
        except Exception as e:
            self._abort_acquire(previous_state)
            raise DeviceUnavailable(
                "Microphone access denied",
                details={"error": str(e)}
            ) from e

        if self.state != RecordingState.ACQUIRING:
            # Discarded or closed while the device was being acquired
            await self.device.release(handle)
            raise InvalidAction("Recording was cancelled before it started")

        self._handle = handle
        self.artifact = None
        self.elapsed_seconds = 0
        self.state = RecordingState.RECORDING
        self._timer = asyncio.create_task(self._tick())
        logger.debug(f"Recording started on {handle}")

    async def end(self) -> Optional[bytes]:
        """
        Finalize the capture and return the artifact.
        Outside RECORDING this is a no-op returning None.
        """
        if self.state != RecordingState.RECORDING:
            return None

        handle = self._handle
        self._handle = None
        self._stop_timer()
        try:
            artifact = await self.device.finalize(handle)
        except Exception as e:
            self.state = RecordingState.IDLE
            raise DeviceUnavailable(
                "Recording could not be finalized",
                details={"error": str(e)}
            ) from e
        finally:
            await self.device.release(handle)

        self.artifact = artifact
        self.state = RecordingState.CAPTURED
        logger.debug(f"Recording captured ({len(artifact)} bytes, {self.elapsed_seconds}s)")
        return artifact

    async def discard(self):
        """Drop any active capture or artifact and return to IDLE."""
        if self.state == RecordingState.CLOSED:
            return
        await self._teardown()
        self.artifact = None

    async def close(self):
        await self.discard()
        self.state = RecordingState.CLOSED

    async def _teardown(self):
        self._stop_timer()
        handle = self._handle
        self._handle = None
        if handle is not None:
            await self.device.release(handle)
        self.state = RecordingState.IDLE
        self.elapsed_seconds = 0

    def _abort_acquire(self, previous_state: RecordingState):
        if self.state == RecordingState.ACQUIRING:
            self.state = previous_state

    def _stop_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _tick(self):
        while True:
            await asyncio.sleep(self.tick_seconds)
            self.elapsed_seconds += 1
