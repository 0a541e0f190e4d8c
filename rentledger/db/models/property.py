import uuid

from sqlalchemy import Column, DateTime, String, Uuid

from rentledger.db.base import Base, utcnow


class Property(Base):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    code = Column(String(32), unique=True, nullable=False)
    city = Column(String(120), nullable=False)
    country = Column(String(120), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
