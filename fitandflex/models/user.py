from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class User(Base):
    __tablename__ = "users"

    id_user = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(150), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=True)
    gender = Column(String(20), nullable=True)
    birth_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    id_role = Column(Integer, ForeignKey("roles.id_role"), nullable=False)
    id_branch = Column(Integer, ForeignKey("branches.id_branch"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    role = relationship("Role", back_populates="users", lazy="joined")
    branch = relationship("Branch", back_populates="users")
    reservations = relationship("Reservation", back_populates="user")

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role is not None else None
