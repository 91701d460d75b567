from enum import Enum


class Role(str, Enum):
    """Exclusive role held by an account. Stored as its value in user_roles."""
    ADMIN = "admin"
    DOCTOR = "doctor"

    @property
    def home_path(self) -> str:
        """Landing route for clients after sign-in."""
        if self is Role.ADMIN:
            return "/admin"
        if self is Role.DOCTOR:
            return "/doctor"
        raise ValueError(f"Unhandled role: {self!r}")

    @classmethod
    def parse(cls, value) -> "Role":
        """Parse a stored role value; unknown values raise ValueError."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())
