from sqlalchemy import Column, Integer, String
from medicare.database import Base


class IdSequence(Base):
    """Named monotonic counter. Values are consumed, never handed out twice."""
    __tablename__ = "id_sequences"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
