from medicare.scanner.camera import CameraSessionManager, ScannerState
from medicare.scanner.devices import (
    CameraDevice,
    CaptureBackend,
    CaptureHandle,
    OpenCVCaptureBackend,
    order_devices,
)
from medicare.scanner.validation import is_likely_worker_id, validate_manual_id

__all__ = [
    "CameraSessionManager",
    "ScannerState",
    "CameraDevice",
    "CaptureBackend",
    "CaptureHandle",
    "OpenCVCaptureBackend",
    "order_devices",
    "is_likely_worker_id",
    "validate_manual_id",
]
