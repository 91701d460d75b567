from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from medicare.database import Base


class Worker(Base):
    __tablename__ = "workers"

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(String(64), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(String(10), nullable=False)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Deleting a worker removes their visit history
    visits = relationship(
        "MedicalVisit",
        back_populates="worker",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
