"""
SQLAlchemy ORM models for IronLog database tables.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class User(Base):
    """The account owning cycle preferences."""

    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hard_weeks: Mapped[int] = mapped_column(Integer, default=6)
    deload_weeks: Mapped[int] = mapped_column(Integer, default=1)
    # Active cycle; overrides apply only while this cycle runs
    cycle_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    cycle_hard_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cycle_deload_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"


class Workout(Base):
    """A named workout scheduled on one ISO weekday (1=Mon..7=Sun)."""

    __tablename__ = "workouts"
    __table_args__ = (UniqueConstraint("name", "day_of_week"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50))
    day_of_week: Mapped[int] = mapped_column(Integer, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, onupdate=_now
    )

    exercises: Mapped[list[Exercise]] = relationship(
        "Exercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="Exercise.order_index",
    )

    def __repr__(self) -> str:
        return f"<Workout id={self.id} name={self.name} day={self.day_of_week}>"


class Exercise(Base):
    """An exercise slot within a workout, with its rep range and start weight."""

    __tablename__ = "exercises"
    __table_args__ = (
        UniqueConstraint("workout_id", "order_index"),
        Index("idx_exercises_workout", "workout_id", "order_index"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id", ondelete="CASCADE"))
    order_index: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(100))
    target_sets: Mapped[int] = mapped_column(Integer)
    target_reps_min: Mapped[int] = mapped_column(Integer)
    target_reps_max: Mapped[int] = mapped_column(Integer)
    default_weight: Mapped[float] = mapped_column(Float)

    workout: Mapped[Workout] = relationship("Workout", back_populates="exercises")

    def __repr__(self) -> str:
        return f"<Exercise id={self.id} workout_id={self.workout_id} name={self.name}>"


class WorkoutLog(Base):
    """A single logged set."""

    __tablename__ = "workout_logs"
    __table_args__ = (
        Index("idx_workout_logs_exercise", "exercise_id", "logged_at"),
        Index("idx_workout_logs_workout", "workout_id", "logged_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id"))
    # No cascade: history survives a deleted exercise through exercise_name
    exercise_id: Mapped[int] = mapped_column(Integer)
    logged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    set_number: Mapped[int] = mapped_column(Integer)
    reps: Mapped[int] = mapped_column(Integer)
    weight: Mapped[float] = mapped_column(Float)
    exercise_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    grip: Mapped[str | None] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<WorkoutLog id={self.id} exercise_id={self.exercise_id} "
            f"set={self.set_number} reps={self.reps} weight={self.weight}>"
        )
