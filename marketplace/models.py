# marketplace/models.py
"""SQLAlchemy ORM models for persisted entities.

`Estate` rows are immutable once imported; `Chair` rows carry a `stock`
counter that purchases decrement, and are deleted when it reaches zero.
"""
from sqlalchemy import Column, Integer, String, Float, Index
from .db import Base

class Estate(Base):
    __tablename__ = "estate"
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(64), nullable=False)
    description = Column(String(4096), nullable=False)
    thumbnail = Column(String(128), nullable=False)
    address = Column(String(128), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    rent = Column(Integer, nullable=False)
    door_height = Column(Integer, nullable=False)
    door_width = Column(Integer, nullable=False)
    features = Column(String(64), nullable=False)
    popularity = Column(Integer, nullable=False)

class Chair(Base):
    __tablename__ = "chair"
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(64), nullable=False)
    description = Column(String(4096), nullable=False)
    thumbnail = Column(String(128), nullable=False)
    price = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    width = Column(Integer, nullable=False)
    depth = Column(Integer, nullable=False)
    color = Column(String(64), nullable=False)
    features = Column(String(64), nullable=False)
    kind = Column(String(64), nullable=False)
    popularity = Column(Integer, nullable=False)
    stock = Column(Integer, nullable=False)

Index("idx_estate_door_width_height_popularity", Estate.door_width, Estate.door_height, Estate.popularity)
Index("idx_estate_rent_popularity_id", Estate.rent, Estate.popularity, Estate.id)
Index("idx_estate_latitude_longitude", Estate.latitude, Estate.longitude)
Index("idx_estate_popularity_id", Estate.popularity.desc(), Estate.id)
Index("idx_chair_price_popularity", Chair.price, Chair.popularity)
Index("idx_chair_price_id", Chair.price, Chair.id)
Index("idx_chair_popularity_id", Chair.popularity.desc(), Chair.id)
