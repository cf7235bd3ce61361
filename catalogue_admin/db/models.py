"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from catalogue_admin.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100))
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="user")
    is_active = Column(Boolean, default=True)
    email = Column(String(100), unique=True)
    company_name = Column(String(100))
    phone_number = Column(String(30))
    city = Column(String(100))
    # 软删除，保留下载与日志记录的关联
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login_at = Column(DateTime(timezone=True))


class Catalogue(Base):
    __tablename__ = "catalogues"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    file_name = Column(String(255), nullable=False, index=True)
    original_name = Column(String(255), nullable=False, index=True)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    uploaded_by = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    download_count = Column(Integer, nullable=False, default=0)
    description = Column(Text)
    category = Column(String(100))
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    uploader = relationship("Account")


class Download(Base):
    __tablename__ = "downloads"
    __table_args__ = (
        Index("ix_downloads_user_timestamp", "user_id", "timestamp"),
        Index("ix_downloads_catalogue_timestamp", "catalogue_id", "timestamp"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    # 旧版批量上报接口可能无法关联到具体目录
    catalogue_id = Column(String(36), ForeignKey("catalogues.id"), nullable=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer)
    ip_address = Column(String(45))
    user_agent = Column(String(500))
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = relationship("Account")
    catalogue = relationship("Catalogue")


class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_type_timestamp", "type", "timestamp"),
        Index("ix_activities_user_timestamp", "user_id", "timestamp"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(50), nullable=False)
    user_id = Column(String(36), nullable=True)
    admin_id = Column(String(36), nullable=True)
    details = Column(Text)
    ip_address = Column(String(45))
    user_agent = Column(String(500))
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(50))
    company_name = Column(String(100))
    phone_number = Column(String(30))
    city = Column(String(100))
    source = Column(String(20), nullable=False, default="app")
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    subscribed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    unsubscribed_at = Column(DateTime(timezone=True))
    unsubscribe_token = Column(String(64), unique=True, index=True)
    last_email_sent = Column(DateTime(timezone=True))
    email_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
