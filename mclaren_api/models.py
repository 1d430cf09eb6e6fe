"""
Database models for the McLaren API.

This module defines the SQLAlchemy ORM entities exposed as API resources:
grand prixes (races), cars and drivers. Relationships are loaded eagerly
with ``selectin`` because async sessions cannot lazy-load attributes during
serialization. Every relationship sets ``join_depth``, so the two-way
links are followed GRAPH_DEPTH hops from the queried entity in both
directions.
"""

from typing import Any

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base: Any = declarative_base()

DEFAULT_TEAM = "McLaren"

# Relationship hops loaded from the entity a query starts at
GRAPH_DEPTH = 3


car_grand_prixes = Table(
    "car_grand_prixes",
    Base.metadata,
    Column("car_id", Integer, ForeignKey("cars.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "grand_prix_id",
        Integer,
        ForeignKey("grand_prixes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class TimestampMixin:
    """Audit columns maintained by the database."""

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)


class GrandPrix(TimestampMixin, Base):
    """
    A race on the calendar.

    Attributes:
        id: Primary key identifier
        name: Race name (unique, e.g. "British Grand Prix")
        location: Circuit or city
        race_date: Date of the race
        laps: Scheduled number of laps
        cars: Cars entered in the race
    """

    __tablename__ = "grand_prixes"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), unique=True, nullable=False, index=True)
    location = Column(String(120), nullable=False)
    race_date = Column(Date, nullable=True, index=True)
    laps = Column(Integer, nullable=True)

    cars = relationship(
        "Car",
        secondary=car_grand_prixes,
        back_populates="grand_prixes",
        lazy="selectin",
        join_depth=GRAPH_DEPTH,
    )

    def __repr__(self) -> str:
        return f"<GrandPrix id={self.id} name={self.name!r}>"


class Car(TimestampMixin, Base):
    """
    A McLaren race car.

    Attributes:
        id: Primary key identifier
        model: Chassis designation (unique, e.g. "MCL38")
        season: Season the car raced in
        engine: Power unit supplier
        drivers: Drivers assigned to the car
        grand_prixes: Races the car was entered in
    """

    __tablename__ = "cars"

    id = Column(Integer, primary_key=True)
    model = Column(String(50), unique=True, nullable=False, index=True)
    season = Column(Integer, nullable=False, index=True)
    engine = Column(String(80), nullable=True)

    drivers = relationship(
        "Driver", back_populates="car", lazy="selectin", join_depth=GRAPH_DEPTH
    )
    grand_prixes = relationship(
        "GrandPrix",
        secondary=car_grand_prixes,
        back_populates="cars",
        lazy="selectin",
        join_depth=GRAPH_DEPTH,
    )

    def __repr__(self) -> str:
        return f"<Car id={self.id} model={self.model!r}>"


class Driver(TimestampMixin, Base):
    """
    A driver.

    Attributes:
        id: Primary key identifier
        name: Driver name
        number: Permanent race number (unique when set)
        nationality: Nationality
        team: Team name
        car_id: Assigned car (optional)
        car: Assigned car entity
    """

    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False, index=True)
    number = Column(Integer, unique=True, nullable=True)
    nationality = Column(String(80), nullable=True)
    team = Column(String(80), nullable=False, default=DEFAULT_TEAM, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="SET NULL"), nullable=True)

    car = relationship(
        "Car", back_populates="drivers", lazy="selectin", join_depth=GRAPH_DEPTH
    )

    def __repr__(self) -> str:
        return f"<Driver id={self.id} name={self.name!r}>"
