from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class Product(Base):
    """A purchasable membership plan sold by a branch."""

    __tablename__ = "products"
    __table_args__ = (UniqueConstraint("id_branch", "sku", name="uq_product_branch_sku"),)

    id_product = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)
    sku = Column(String(50), nullable=False)
    membership_type = Column(String(50), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_days = Column(Integer, nullable=False)
    max_users = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    auto_renewal = Column(Boolean, nullable=False, default=False)
    trial_period_days = Column(Integer, nullable=True)
    image_url = Column(String(500), nullable=True)
    benefits = Column(Text, nullable=True)
    features = Column(Text, nullable=True)
    id_branch = Column(Integer, ForeignKey("branches.id_branch"), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    branch = relationship("Branch", back_populates="products")
    memberships = relationship("UserMembership", back_populates="product")

    @property
    def is_unlimited(self) -> bool:
        return self.max_users is None
