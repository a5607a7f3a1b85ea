"""
Media layer for CampusPrep

The camera/microphone boundary. A MediaDevice hands out one MediaStream
per session; the session owns it exclusively and toggles its tracks.
"""

import logging
from typing import Protocol
from uuid import uuid4

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class MediaError(Exception):
    """Base class for media acquisition failures."""
    pass


class MediaPermissionDenied(MediaError):
    """The user refused camera/microphone access."""
    pass


class MediaUnsupported(MediaError):
    """The environment has no usable capture device."""
    pass


class MediaConstraints(BaseModel):
    video: bool = True
    audio: bool = True


class MediaStream(BaseModel):
    """An acquired capture stream with independently enabled tracks."""

    id: str = Field(default_factory=lambda: f"stream_{uuid4().hex[:8]}")
    video_enabled: bool = True
    audio_enabled: bool = True
    has_video: bool = True
    has_audio: bool = True
    released: bool = False

    def set_video(self, enabled: bool) -> bool:
        if self.has_video and not self.released:
            self.video_enabled = enabled
        return self.video_enabled

    def set_audio(self, enabled: bool) -> bool:
        if self.has_audio and not self.released:
            self.audio_enabled = enabled
        return self.audio_enabled


class MediaDevice(Protocol):
    async def acquire(self, constraints: MediaConstraints) -> MediaStream:
        ...

    async def release(self, stream: MediaStream) -> None:
        ...


class SimulatedMediaDevice:
    """
    Device stand-in for server-side sessions.

    ``permission`` and ``supported`` can be flipped to exercise the denied
    and unsupported paths; ``acquired`` counts streams currently held.
    """

    def __init__(self, permission: bool = True, supported: bool = True):
        self.permission = permission
        self.supported = supported
        self.acquired = 0

    async def acquire(self, constraints: MediaConstraints) -> MediaStream:
        if not self.supported:
            raise MediaUnsupported("No camera or microphone is available")
        if not self.permission:
            raise MediaPermissionDenied("Camera and microphone access was denied")

        stream = MediaStream(
            has_video=constraints.video,
            has_audio=constraints.audio,
            video_enabled=constraints.video,
            audio_enabled=constraints.audio,
        )
        self.acquired += 1
        logger.debug(f"Acquired media stream {stream.id}")
        return stream

    async def release(self, stream: MediaStream) -> None:
        if stream.released:
            return
        stream.released = True
        stream.video_enabled = False
        stream.audio_enabled = False
        self.acquired = max(0, self.acquired - 1)
        logger.debug(f"Released media stream {stream.id}")
