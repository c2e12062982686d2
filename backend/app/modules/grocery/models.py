from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.db import Base


class User(Base):
    __tablename__ = "users"

    Id = Column(Integer, primary_key=True, index=True)
    Name = Column(String(120), nullable=False)
    Email = Column(String(254), nullable=False, unique=True, index=True)
    CreatedAt = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class Couple(Base):
    __tablename__ = "couples"

    Id = Column(Integer, primary_key=True, index=True)
    User1Id = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    User2Id = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    CreatedAt = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    User1 = relationship("User", foreign_keys=[User1Id])
    User2 = relationship("User", foreign_keys=[User2Id])
    Lists = relationship("GroceryList", back_populates="Couple")


class Category(Base):
    __tablename__ = "categories"

    Id = Column(Integer, primary_key=True, index=True)
    Name = Column(String(120), nullable=False)
    CreatedAt = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    Items = relationship("GroceryItem", back_populates="Category")


class GroceryList(Base):
    __tablename__ = "grocery_lists"
    __table_args__ = (
        UniqueConstraint("CoupleId", "WeekStart", name="uq_grocery_lists_couple_week"),
    )

    Id = Column(Integer, primary_key=True, index=True)
    CoupleId = Column(Integer, ForeignKey("couples.Id"), nullable=False, index=True)
    WeekStart = Column(Date, nullable=False)
    CreatedAt = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    Couple = relationship("Couple", back_populates="Lists")
    Items = relationship("GroceryItem", back_populates="List")


class GroceryItem(Base):
    __tablename__ = "grocery_items"
    __table_args__ = (
        Index("ix_grocery_items_list_completed", "ListId", "IsCompleted"),
    )

    Id = Column(Integer, primary_key=True, index=True)
    ListId = Column(Integer, ForeignKey("grocery_lists.Id"), nullable=False, index=True)
    CategoryId = Column(Integer, ForeignKey("categories.Id"), nullable=False, index=True)
    Name = Column(String(200), nullable=False)
    Quantity = Column(String(80))
    IsCompleted = Column(Boolean, nullable=False, default=False)
    AddedByUserId = Column(Integer, ForeignKey("users.Id"), nullable=False)
    CompletedByUserId = Column(Integer, ForeignKey("users.Id"))
    CreatedAt = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    CompletedAt = Column(DateTime(timezone=True))

    List = relationship("GroceryList", back_populates="Items")
    Category = relationship("Category", back_populates="Items")
