class MedicareError(Exception):
    """Base for every error the records service reports to a caller."""
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None, details: dict = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(MedicareError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(MedicareError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(MedicareError):
    status_code = 403
    default_message = "Forbidden"


class WorkerNotFound(MedicareError):
    status_code = 404
    default_message = "Worker not found"

    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__(f"Worker {worker_id} not found", {"worker_id": worker_id})


class DoctorNotFound(MedicareError):
    status_code = 404
    default_message = "Doctor not found"


class AlreadyProvisioned(MedicareError):
    status_code = 400
    default_message = "Admin account already exists. Demo accounts have already been created."


class PlatformError(MedicareError):
    status_code = 500


class DecodeFailure(MedicareError):
    status_code = 422
    default_message = "No QR code found in image"


class ScannerError(MedicareError):
    """A capture device could not be started or read."""
    status_code = 503
    default_message = "Could not access camera"


class NoCameraFound(ScannerError):
    default_message = (
        "No camera device found. Connect a camera or allow camera permission, "
        "or enter the Worker ID manually."
    )
