from medicare.models.user import User, Profile, UserRole
from medicare.models.worker import Worker
from medicare.models.visit import MedicalVisit
from medicare.models.sequence import IdSequence

__all__ = ["User", "Profile", "UserRole", "Worker", "MedicalVisit", "IdSequence"]
