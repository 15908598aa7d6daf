import itertools
from abc import ABC, abstractmethod
from packages.ivs_core.errors import DeviceUnavailable

_handle_ids = itertools.count(1)

class DeviceHandle:
    """Opaque token for one acquisition of the capture device."""
    def __init__(self, source: str = "microphone"):
        self.id = next(_handle_ids)
        self.source = source

    def __repr__(self) -> str:
        return f"DeviceHandle(id={self.id}, source={self.source!r})"

class ICaptureDevice(ABC):
    @abstractmethod
    async def acquire(self) -> DeviceHandle:
        """
        Request the capture device.
        Raises DeviceUnavailable if access is denied or the device is busy.
        """
        pass

    @abstractmethod
    async def finalize(self, handle: DeviceHandle) -> bytes:
        """Stop capturing and return the recorded artifact."""
        pass

    @abstractmethod
    async def release(self, handle: DeviceHandle) -> None:
        pass

class UploadOnlyCaptureDevice(ICaptureDevice):
    """
    Used when the server has no microphone of its own.
    Answers must be recorded by the client and uploaded per question.
    """
    async def acquire(self) -> DeviceHandle:
        raise DeviceUnavailable(
            "Server-side recording is not available; upload the recording instead",
            details={"source": "upload"}
        )

    async def finalize(self, handle: DeviceHandle) -> bytes:
        raise DeviceUnavailable("Server-side recording is not available")

    async def release(self, handle: DeviceHandle) -> None:
        pass
