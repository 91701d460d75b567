"""
Capture device backends for the camera session manager.

A backend enumerates devices and opens a capture handle for one of them.
The OpenCV backend probes video indices and reads Video4Linux labels where
the platform exposes them.
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

import cv2
import numpy as np

from medicare.config import get_settings
from medicare.exceptions import ScannerError

logger = logging.getLogger(__name__)

V4L_SYSFS = "/sys/class/video4linux"

PREFERRED_LABEL = re.compile(r"back|rear|environment", re.IGNORECASE)
SECONDARY_LABEL = re.compile(r"camera 2|camera2", re.IGNORECASE)


@dataclass(frozen=True)
class CameraDevice:
    id: Union[int, str]
    label: str


class CaptureHandle(ABC):
    """An open, exclusive capture device."""

    @abstractmethod
    def read(self) -> Optional[np.ndarray]:
        """Return the next frame, or None when no frame is available."""
        ...

    @abstractmethod
    def release(self) -> None:
        ...


class CaptureBackend(ABC):
    @abstractmethod
    def list_cameras(self) -> list[CameraDevice]:
        ...

    @abstractmethod
    def open(self, device: CameraDevice) -> CaptureHandle:
        """Open the device or raise ScannerError."""
        ...


def order_devices(cameras: list[CameraDevice]) -> list[CameraDevice]:
    """Preferred (rear-facing) device first, then the rest in enumeration order."""
    if not cameras:
        return []
    preferred = (
        next((c for c in cameras if PREFERRED_LABEL.search(c.label or "")), None)
        or next((c for c in cameras if SECONDARY_LABEL.search(c.label or "")), None)
        or cameras[0]
    )
    return [preferred] + [c for c in cameras if c.id != preferred.id]


class OpenCVCaptureHandle(CaptureHandle):
    def __init__(self, capture: "cv2.VideoCapture"):
        self._capture = capture

    def read(self) -> Optional[np.ndarray]:
        if self._capture is None:
            return None
        ok, frame = self._capture.read()
        return frame if ok else None

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None


class OpenCVCaptureBackend(CaptureBackend):
    def __init__(self, max_probe: Optional[int] = None):
        self.max_probe = max_probe if max_probe is not None else get_settings().scanner_max_probe

    @staticmethod
    def _device_label(index: int) -> str:
        name_file = os.path.join(V4L_SYSFS, f"video{index}", "name")
        try:
            with open(name_file, encoding="utf-8") as f:
                return f.read().strip() or f"Camera {index}"
        except OSError:
            return f"Camera {index}"

    def list_cameras(self) -> list[CameraDevice]:
        cameras = []
        for index in range(self.max_probe):
            capture = cv2.VideoCapture(index)
            try:
                if capture.isOpened():
                    cameras.append(CameraDevice(id=index, label=self._device_label(index)))
            finally:
                capture.release()
        logger.debug("Found %d camera(s): %s", len(cameras), [c.label for c in cameras])
        return cameras

    def open(self, device: CameraDevice) -> CaptureHandle:
        capture = cv2.VideoCapture(device.id)
        if not capture.isOpened():
            capture.release()
            raise ScannerError(f"Could not open camera '{device.label}'")
        return OpenCVCaptureHandle(capture)
