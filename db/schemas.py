from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from db.base import Base


class JobListing(Base):
    __tablename__ = "job_listings"
    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(String(300), nullable=False)
    source = Column(String(50), nullable=False)
    job_title = Column(String(300), nullable=False)
    company_name = Column(String(200), nullable=False)
    company_logo_url = Column(String(1000), nullable=True)
    location = Column(String(300), nullable=True)
    remote_type = Column(String(20), nullable=True)
    employment_type = Column(String(100), nullable=True)
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String(10), nullable=True)
    salary_period = Column(String(10), nullable=True)
    job_description = Column(Text, nullable=True)
    posted_date = Column(String(100), nullable=True)
    apply_url = Column(String(2000), nullable=True)
    is_active = Column(Boolean, default=True)
    match_score = Column(Integer, nullable=True)
    raw_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    __table_args__ = (
        UniqueConstraint("external_id", "source", name="uq_listing_external_source"),
    )


class CareerVault(Base):
    __tablename__ = "career_vault"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(100), nullable=False, unique=True)
    initial_analysis = Column(JSON, nullable=True)  # {"recommended_positions": [...], ...}
    transferable_skills = relationship("VaultTransferableSkill", back_populates="vault", cascade="all, delete-orphan")


class VaultTransferableSkill(Base):
    __tablename__ = "vault_transferable_skills"
    id = Column(Integer, primary_key=True, autoincrement=True)
    vault_id = Column(Integer, ForeignKey("career_vault.id"), nullable=False)
    stated_skill = Column(String(200), nullable=False)
    vault = relationship("CareerVault", back_populates="transferable_skills")
