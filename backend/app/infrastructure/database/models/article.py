"""SQLAlchemy ORM models for articles, tags and attached media."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from app.infrastructure.database.base import Base


def _generate_uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


article_tags = Table(
    "article_tags",
    Base.metadata,
    Column("article_id", String(36), ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class TagModel(Base):
    """ORM model — maps to the 'tags' table."""

    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=_generate_uuid)
    name = Column(String(100), nullable=False, index=True)
    name_ar = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<TagModel(id={self.id}, name='{self.name}')>"


class ArticleModel(Base):
    """ORM model — maps to the 'articles' table."""

    __tablename__ = "articles"

    id = Column(String(36), primary_key=True, default=_generate_uuid)
    title = Column(String(255), nullable=False, index=True)
    title_ar = Column(String(255), nullable=False)
    slug = Column(String(300), nullable=True, unique=True)
    slug_ar = Column(String(300), nullable=True)
    content = Column(Text, nullable=True)
    content_ar = Column(Text, nullable=True)
    summary = Column(Text, nullable=True)
    summary_ar = Column(Text, nullable=True)
    category_id = Column(String(36), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="draft", index=True)
    author_id = Column(String(36), nullable=False, index=True)
    author_email = Column(String(255), nullable=False)
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    published_at = Column(DateTime(timezone=True), nullable=True)

    tags = relationship("TagModel", secondary=article_tags, lazy="selectin")
    media = relationship(
        "ArticleMediaModel",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleMediaModel.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_articles_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ArticleModel(id={self.id}, title='{self.title}', status='{self.status}')>"


class ArticleMediaModel(Base):
    """A stored file attached to one article as featured media, image or video."""

    __tablename__ = "article_media"

    id = Column(String(36), primary_key=True)
    article_id = Column(
        String(36),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(String(20), nullable=False)  # "featured" | "image" | "video"
    position = Column(Integer, nullable=False, default=0)
    url = Column(String(1000), nullable=False)
    filename = Column(String(500), nullable=False)
    mimetype = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False, default=0)
    path = Column(String(1000), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    article = relationship("ArticleModel", back_populates="media")
