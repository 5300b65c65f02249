"""
SQLAlchemy 2.0 ORM Models — Market Signal Engine
=================================================

Persistence collaborator for the extraction and opportunity pipelines.

  - snake_case names
  - BIGINT PKs (auto-increment)
  - Explicit FKs
  - created_at / recorded_at on time-series tables

Tables are grouped by functional area:
  1. Configuration (markets, categories, competitors)
  2. Catalog (products, price points)
  3. Results (review summaries, alerts, proposals)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    BigInteger,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base

# SQLite only auto-assigns INTEGER PRIMARY KEY columns
_PK = BigInteger().with_variant(Integer, "sqlite")


# ══════════════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════════════

class AlertType(str, PyEnum):
    NEW_PRODUCT = "NEW_PRODUCT"
    PRICE_CHANGE = "PRICE_CHANGE"
    SENTIMENT_DROP = "SENTIMENT_DROP"


class Sentiment(str, PyEnum):
    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


class ProposalStatus(str, PyEnum):
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# ══════════════════════════════════════════════════════════════════════
# 1. CONFIGURATION
# ══════════════════════════════════════════════════════════════════════

class Market(Base):
    """A marketplace being watched (e.g. "Amazon JP - Audio")."""
    __tablename__ = "market"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    categories: Mapped[list["Category"]] = relationship("Category", back_populates="market")
    competitors: Mapped[list["Competitor"]] = relationship("Competitor", back_populates="market")


class Category(Base):
    """A product category inside a market; the unit of opportunity analysis."""
    __tablename__ = "category"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    market_id: Mapped[int] = mapped_column(ForeignKey("market.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    market: Mapped["Market"] = relationship("Market", back_populates="categories")
    ranking_urls: Mapped[list["RankingUrl"]] = relationship("RankingUrl", back_populates="category")
    proposals: Mapped[list["Proposal"]] = relationship("Proposal", back_populates="category")


class RankingUrl(Base):
    """A best-seller / search ranking page registered for a category."""
    __tablename__ = "ranking_url"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)

    category: Mapped["Category"] = relationship("Category", back_populates="ranking_urls")


class Competitor(Base):
    """A competing seller/brand tracked in a market."""
    __tablename__ = "competitor"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    market_id: Mapped[int] = mapped_column(ForeignKey("market.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    market: Mapped["Market"] = relationship("Market", back_populates="competitors")
    products: Mapped[list["Product"]] = relationship("Product", back_populates="competitor")
    reviews: Mapped[list["ReviewSummary"]] = relationship(
        "ReviewSummary",
        back_populates="competitor",
        order_by=lambda: ReviewSummary.latest_first(),
    )


# ══════════════════════════════════════════════════════════════════════
# 2. CATALOG
# ══════════════════════════════════════════════════════════════════════

class Product(Base):
    """A competitor product page. `url` is what the extractor fetches."""
    __tablename__ = "product"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    competitor_id: Mapped[int] = mapped_column(ForeignKey("competitor.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(1024), nullable=False)
    url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    current_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str] = mapped_column(String(10), default="JPY")
    first_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    competitor: Mapped["Competitor"] = relationship("Competitor", back_populates="products")
    price_points: Mapped[list["PricePoint"]] = relationship("PricePoint", back_populates="product")


class PricePoint(Base):
    """Price observations for a product over time."""
    __tablename__ = "price_point"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("product.id"), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="JPY")
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    product: Mapped["Product"] = relationship("Product", back_populates="price_points")


# ══════════════════════════════════════════════════════════════════════
# 3. RESULTS
# ══════════════════════════════════════════════════════════════════════

class ReviewSummary(Base):
    """Aggregate review state for a competitor at collection time."""
    __tablename__ = "review_summary"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    competitor_id: Mapped[int] = mapped_column(ForeignKey("competitor.id"), nullable=False)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False)
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    sentiment: Mapped[Sentiment] = mapped_column(Enum(Sentiment), default=Sentiment.NEUTRAL)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    competitor: Mapped["Competitor"] = relationship("Competitor", back_populates="reviews")

    @classmethod
    def latest_first(cls):
        """Newest summary first; insertion order breaks timestamp ties."""
        return (cls.recorded_at.desc(), cls.id.desc())


class Alert(Base):
    """An anomaly raised by the diff engine (new listing, price shift, sentiment drop)."""
    __tablename__ = "alert"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    type: Mapped[AlertType] = mapped_column(Enum(AlertType))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Proposal(Base):
    """A persisted product-opportunity proposal. Created as DRAFT."""
    __tablename__ = "proposal"

    id: Mapped[int] = mapped_column(_PK, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    target_price: Mapped[float] = mapped_column(Float, nullable=False)
    features: Mapped[str] = mapped_column(Text, default="")
    keywords: Mapped[str] = mapped_column(Text, default="")
    reasoning: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[ProposalStatus] = mapped_column(Enum(ProposalStatus), default=ProposalStatus.DRAFT)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    category: Mapped["Category"] = relationship("Category", back_populates="proposals")
