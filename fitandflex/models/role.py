from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class Role(Base):
    __tablename__ = "roles"

    id_role = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(255), nullable=True)

    users = relationship("User", back_populates="role")
