"""
Camera session manager: owns at most one live capture + decode session.

The manager is an explicit handle. Use it as a context manager (or call
close()) so the capture device is released on every exit path. Decoding is
one-shot: the first identifier read stops the session before the caller's
callback runs, and no callback fires once the owner has been closed.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from medicare.config import get_settings
from medicare.exceptions import DecodeFailure, NoCameraFound, ScannerError
from medicare.scanner.devices import CameraDevice, CaptureBackend, CaptureHandle, order_devices
from medicare.scanner.validation import validate_manual_id

logger = logging.getLogger(__name__)

ScanCallback = Callable[[str], None]
Decoder = Callable[[object], str]

# Consecutive empty reads before a live session is treated as a device failure
MAX_EMPTY_READS = 50
JOIN_TIMEOUT = 2.0


class ScannerState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    ERROR = "error"


def _default_decoder(frame) -> str:
    from medicare.services.qr_service import qr_service
    return qr_service.decode_image(frame)


class CameraSessionManager:
    def __init__(
        self,
        backend: Optional[CaptureBackend] = None,
        decoder: Optional[Decoder] = None,
        fps: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        settings = get_settings()
        if backend is None:
            from medicare.scanner.devices import OpenCVCaptureBackend
            backend = OpenCVCaptureBackend()
        self.backend = backend
        self.decoder = decoder or _default_decoder
        self.fps = fps or settings.scanner_fps
        self.retry_delay = settings.scanner_retry_delay if retry_delay is None else retry_delay

        self._lock = threading.RLock()
        self._state = ScannerState.IDLE
        self._handle: Optional[CaptureHandle] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._session: Optional[object] = None
        self._closed = False
        self.active_device: Optional[CameraDevice] = None
        self.last_error: Optional[Exception] = None

    # Lifecycle

    def __enter__(self) -> "CameraSessionManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def state(self) -> ScannerState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._state is ScannerState.SCANNING

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Owner is going away: stop, and suppress any later callbacks."""
        self._closed = True
        self.stop()

    # Live scanning

    def start(self, on_scan: ScanCallback) -> CameraDevice:
        """Start scanning on the best available device; returns the device in use."""
        if self._closed:
            raise ScannerError("Scanner has been closed")
        # Outside the lock: joining a reader thread that is waiting on it would stall
        self.stop()

        with self._lock:
            self.last_error = None

            try:
                cameras = self.backend.list_cameras()
            except Exception as e:
                logger.warning("Camera enumeration failed: %s", e)
                cameras = []

            if not cameras:
                return self._fail(NoCameraFound())

            last_err: Optional[Exception] = None
            for device in order_devices(cameras):
                try:
                    self._start_device(device, on_scan)
                    last_err = None
                    break
                except Exception as e:
                    last_err = e
                    logger.warning("Failed to start camera %r: %s", device.label, e)
                    self.stop()
                    if self.retry_delay:
                        time.sleep(self.retry_delay)

            if last_err is not None:
                return self._fail(ScannerError(f"Could not access camera: {last_err}"), cause=last_err)

            logger.info("Scanning on camera %r", self.active_device.label)
            return self.active_device

    def _fail(self, error: ScannerError, cause: Optional[Exception] = None):
        self._state = ScannerState.ERROR
        self.last_error = error
        logger.error("Error starting scanner: %s", error.message)
        if cause is not None:
            raise error from cause
        raise error

    def _start_device(self, device: CameraDevice, on_scan: ScanCallback) -> None:
        handle = self.backend.open(device)
        session = object()
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(handle, stop_event, session, on_scan),
            name=f"qr-scanner-{device.id}",
            daemon=True,
        )
        self._handle = handle
        self._stop_event = stop_event
        self._session = session
        self._thread = thread
        self.active_device = device
        self._state = ScannerState.SCANNING
        thread.start()

    def _run(self, handle: CaptureHandle, stop_event: threading.Event, session: object, on_scan: ScanCallback) -> None:
        interval = 1.0 / max(self.fps, 1)
        empty_reads = 0
        while not stop_event.is_set():
            try:
                frame = handle.read()
            except Exception as e:
                self._session_failed(session, e)
                return

            if frame is None:
                empty_reads += 1
                if empty_reads >= MAX_EMPTY_READS:
                    self._session_failed(session, ScannerError("Camera stopped delivering frames"))
                    return
            else:
                empty_reads = 0
                try:
                    text = self.decoder(frame)
                except DecodeFailure:
                    text = None
                if text:
                    self._complete(session, text, on_scan)
                    return
            stop_event.wait(interval)

    def _complete(self, session: object, text: str, on_scan: ScanCallback) -> None:
        with self._lock:
            if session is not self._session:
                return
            # Tear down before notifying so the callback may start a new session
            self.stop()
        if self._closed:
            return
        on_scan(text)

    def _session_failed(self, session: object, error: Exception) -> None:
        with self._lock:
            if session is not self._session:
                return
            logger.error("Scanner session failed: %s", error)
            self.stop()
            self._state = ScannerState.ERROR
            self.last_error = error

    def stop(self) -> None:
        """Idempotent. Always leaves the manager IDLE with no device held."""
        with self._lock:
            handle, thread, stop_event = self._handle, self._thread, self._stop_event
            self._handle = None
            self._thread = None
            self._stop_event = None
            self._session = None
            self.active_device = None
            self._state = ScannerState.IDLE

        if stop_event is not None:
            stop_event.set()
        if thread is not None and thread is not threading.current_thread() and thread.is_alive():
            thread.join(timeout=JOIN_TIMEOUT)
        if handle is not None:
            try:
                handle.release()
            except Exception as e:
                logger.error("Error stopping scanner: %s", e)

    # Camera-free paths

    def scan_still_image(self, source, on_scan: Optional[ScanCallback] = None) -> str:
        """Decode a static image instead of the live feed."""
        self.stop()
        text = self.decoder(source)
        if on_scan is not None and not self._closed:
            on_scan(text)
        return text

    def submit_manual(self, value: str, on_scan: Optional[ScanCallback] = None) -> str:
        """Accept a typed identifier (3-64 characters) as the scan result."""
        worker_id = validate_manual_id(value)
        if on_scan is not None and not self._closed:
            on_scan(worker_id)
        return worker_id
