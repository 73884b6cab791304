"""
Async SQLAlchemy repository for IronLog database operations.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from functools import wraps
from typing import Any, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import StaticPool

from ..config import SETTINGS
from ..csv_export import LogExportRow
from ..errors import NotFoundError, ValidationError
from ..schedule import session_duration_minutes
from .models import Base, Exercise, User, Workout, WorkoutLog

_engine: AsyncEngine | None = None
_session: async_sessionmaker[AsyncSession] | None = None

# Type variable for the retry decorator
F = TypeVar("F", bound=Callable[..., Any])

EXERCISE_FIELDS = (
    "name",
    "target_sets",
    "target_reps_min",
    "target_reps_max",
    "default_weight",
    "order_index",
)


@dataclass
class HistorySession:
    """Sets of one workout grouped by calendar date."""

    date: str
    duration_minutes: int | None
    exercises: list[dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "durationMinutes": self.duration_minutes,
            "exercises": self.exercises,
        }


def retry_on_connection_error(max_retries: int = 3, delay: float = 0.1):
    """
    Decorator to retry database operations on connection errors.
    Useful for handling transient connection issues.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            last_exception: Exception | None = None
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if any(
                        keyword in str(e).lower()
                        for keyword in [
                            "connection",
                            "server closed",
                            "operationalerror",
                            "timeout",
                        ]
                    ):
                        last_exception = e
                        if attempt < max_retries - 1:
                            wait_time = delay * (2**attempt)
                            logging.warning(
                                "Database connection error on attempt %d/%d, retrying in %.2fs: %s",
                                attempt + 1,
                                max_retries,
                                wait_time,
                                e,
                            )
                            await asyncio.sleep(wait_time)
                            continue
                    raise
            if last_exception:
                raise last_exception
            raise RuntimeError("Retry mechanism failed unexpectedly")

        return wrapper  # type: ignore

    return decorator


def _prepare_url(url: str) -> tuple[str, dict]:
    """Return sanitized DB URL and connect args.

    Extracts common SSL query parameters and passes them as ``connect_args``.
    ``ssl=false`` becomes ``sslmode=disable``.
    """

    url_obj = make_url(url)
    query = dict(url_obj.query)
    connect_args: dict[str, object] = {}

    sslmode = query.pop("sslmode", None)
    ssl_val = query.pop("ssl", None)
    if ssl_val is not None:
        sslmode = "disable" if str(ssl_val).lower() in {"0", "false", "off", "no"} else "require"
    if sslmode:
        if url_obj.drivername.startswith("postgresql+asyncpg"):
            connect_args["ssl"] = sslmode != "disable"
        else:
            connect_args["sslmode"] = sslmode

    # PgBouncer-friendly settings
    if url_obj.drivername.startswith("postgresql+asyncpg"):
        connect_args.setdefault("statement_cache_size", 0)

    url_obj = url_obj.set(query=query)
    return url_obj.render_as_string(hide_password=False), connect_args


def _is_memory_sqlite(db_url: str) -> bool:
    url_obj = make_url(db_url)
    return url_obj.drivername.startswith("sqlite") and (
        url_obj.database in {":memory:", "", None} or ":memory:" in db_url
    )


async def init_db() -> None:
    """
    Initialize the async database engine and sessionmaker, and create tables if needed.
    """
    global _engine, _session
    if _engine:
        return
    if not SETTINGS.DATABASE_URL:
        logging.error("DATABASE_URL is required for DB initialization.")
        raise RuntimeError("DATABASE_URL is required")
    db_url, connect_args = _prepare_url(SETTINGS.DATABASE_URL)
    engine_kwargs: dict[str, Any] = {"echo": False, "connect_args": connect_args}
    if _is_memory_sqlite(db_url):
        # One shared connection, otherwise every session sees an empty database
        engine_kwargs["poolclass"] = StaticPool
    elif not make_url(db_url).drivername.startswith("sqlite"):
        engine_kwargs.update(
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_timeout=30,
            max_overflow=10,
            pool_size=20,
        )
    _engine = create_async_engine(db_url, **engine_kwargs)
    _session = async_sessionmaker(_engine, expire_on_commit=False)
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logging.info("Database ready (%s)", make_url(db_url).drivername)


def get_session() -> async_sessionmaker[AsyncSession]:
    """
    Get the async sessionmaker. Raises if DB is not initialized.
    """
    if not _session:
        raise RuntimeError("DB not initialized; call init_db() first")
    return _session


async def close_db() -> None:
    """Dispose of the database engine and reset session state."""

    global _engine, _session
    if _engine:
        await _engine.dispose()
    _engine = None
    _session = None


def _require_positive_id(value: int, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer")


def _require_name(name: Any) -> None:
    if not isinstance(name, str) or not name or len(name) > 100:
        raise ValidationError("name must be a non-empty string with max length of 100 characters")


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=UTC)
    return start, start + timedelta(days=1)


# ---- Users / preferences ---------------------------------------------------


async def upsert_owner(email: str) -> User:
    """
    Return the user for ``email``, creating it with default cycle settings.
    """
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(select(User).where(User.email == email))
        user = res.scalar_one_or_none()
        if user is None:
            user = User(
                email=email,
                hard_weeks=SETTINGS.DEFAULT_HARD_WEEKS,
                deload_weeks=SETTINGS.DEFAULT_DELOAD_WEEKS,
            )
            s.add(user)
            await s.commit()
            await s.refresh(user)
            logging.info("Created user %s", user.id)
        return user


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_user_preferences(user_id: int) -> User | None:
    sessmaker = get_session()
    async with sessmaker() as s:
        return await s.get(User, user_id)


async def update_user_preferences(
    user_id: int, hard_weeks: int | None = None, deload_weeks: int | None = None
) -> User:
    """Update the default hard/deload week counts."""
    for value, name in ((hard_weeks, "hard_weeks"), (deload_weeks, "deload_weeks")):
        if value is not None and value < 1:
            raise ValidationError(f"{name} must be at least 1")
    sessmaker = get_session()
    async with sessmaker() as s:
        user = await s.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} not found")
        if hard_weeks is not None:
            user.hard_weeks = hard_weeks
        if deload_weeks is not None:
            user.deload_weeks = deload_weeks
        await s.commit()
        return user


async def upsert_user_cycle_overrides(
    user_id: int,
    cycle_start_date: date,
    cycle_hard_weeks: int,
    cycle_deload_weeks: int,
) -> User:
    """Replace the active cycle wholesale."""
    if cycle_hard_weeks < 1 or cycle_deload_weeks < 1:
        raise ValidationError("cycle weeks must be at least 1")
    sessmaker = get_session()
    async with sessmaker() as s:
        user = await s.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} not found")
        user.cycle_start_date = cycle_start_date
        user.cycle_hard_weeks = cycle_hard_weeks
        user.cycle_deload_weeks = cycle_deload_weeks
        await s.commit()
        return user


# ---- Workouts / exercises --------------------------------------------------


async def get_workouts() -> list[Workout]:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Workout).options(selectinload(Workout.exercises)).order_by(Workout.day_of_week)
        )
        return list(res.scalars().all())


async def get_workout_with_exercises(workout_id: int) -> Workout | None:
    """Workout with its exercises ordered by ``order_index``."""
    _require_positive_id(workout_id, "workoutId")
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Workout)
            .options(selectinload(Workout.exercises))
            .where(Workout.id == workout_id)
        )
        return res.scalar_one_or_none()


async def get_workout_by_day(day_of_week: int) -> Workout | None:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Workout)
            .options(selectinload(Workout.exercises))
            .where(Workout.day_of_week == day_of_week)
            .order_by(Workout.id)
            .limit(1)
        )
        return res.scalar_one_or_none()


async def get_exercise(exercise_id: int) -> Exercise | None:
    _require_positive_id(exercise_id, "exerciseId")
    sessmaker = get_session()
    async with sessmaker() as s:
        return await s.get(Exercise, exercise_id)


async def _commit_exercise(s: AsyncSession, workout_id: int, order_index: int) -> None:
    try:
        await s.commit()
    except IntegrityError as err:
        await s.rollback()
        raise ValidationError(
            f"Workout {workout_id} already has an exercise at position {order_index}"
        ) from err


async def add_exercise(
    workout_id: int,
    name: str,
    order_index: int | None,
    target_sets: int,
    target_reps_min: int,
    target_reps_max: int,
    default_weight: float,
) -> Exercise:
    """
    Append an exercise to a workout. ``order_index=None`` takes the next free slot.
    """
    _require_positive_id(workout_id, "workoutId")
    _require_name(name)
    if target_reps_min > target_reps_max:
        raise ValidationError("target_reps_min must not exceed target_reps_max")
    sessmaker = get_session()
    async with sessmaker() as s:
        if await s.get(Workout, workout_id) is None:
            raise NotFoundError(f"Workout with id {workout_id} not found")
        if order_index is None:
            res = await s.execute(
                select(func.max(Exercise.order_index)).where(Exercise.workout_id == workout_id)
            )
            order_index = (res.scalar() or 0) + 1
        ex = Exercise(
            workout_id=workout_id,
            name=name,
            order_index=order_index,
            target_sets=target_sets,
            target_reps_min=target_reps_min,
            target_reps_max=target_reps_max,
            default_weight=default_weight,
        )
        s.add(ex)
        await _commit_exercise(s, workout_id, order_index)
        await s.refresh(ex)
        return ex


async def update_exercise(exercise_id: int, **changes: Any) -> Exercise:
    """
    Update any of ``EXERCISE_FIELDS``; ``None`` values are left unchanged.
    """
    _require_positive_id(exercise_id, "exerciseId")
    unknown = set(changes) - set(EXERCISE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown exercise fields: {', '.join(sorted(unknown))}")
    updates = {k: v for k, v in changes.items() if v is not None}
    if "name" in updates:
        _require_name(updates["name"])
    sessmaker = get_session()
    async with sessmaker() as s:
        ex = await s.get(Exercise, exercise_id)
        if ex is None:
            raise NotFoundError(f"Exercise with id {exercise_id} not found")
        for key, value in updates.items():
            setattr(ex, key, value)
        if ex.target_reps_min > ex.target_reps_max:
            raise ValidationError("target_reps_min must not exceed target_reps_max")
        await _commit_exercise(s, ex.workout_id, ex.order_index)
        return ex


async def delete_exercise(exercise_id: int) -> None:
    _require_positive_id(exercise_id, "exerciseId")
    sessmaker = get_session()
    async with sessmaker() as s:
        await s.execute(delete(Exercise).where(Exercise.id == exercise_id))
        await s.commit()


# ---- Logs ------------------------------------------------------------------


async def log_set(
    workout_id: int,
    exercise_id: int,
    set_number: int,
    reps: int,
    weight: float,
    grip: str | None = None,
    logged_at: datetime | None = None,
) -> WorkoutLog:
    """Insert a set, snapshotting the exercise name at log time."""
    _require_positive_id(workout_id, "workoutId")
    _require_positive_id(exercise_id, "exerciseId")
    if reps <= 0:
        raise ValidationError("reps must be a positive integer")
    if weight < 0:
        raise ValidationError("weight must be a non-negative number")
    sessmaker = get_session()
    async with sessmaker() as s:
        ex = await s.get(Exercise, exercise_id)
        if ex is None:
            raise NotFoundError(f"Exercise with id {exercise_id} not found")
        row = WorkoutLog(
            workout_id=workout_id,
            exercise_id=exercise_id,
            set_number=set_number,
            reps=reps,
            weight=weight,
            grip=grip,
            exercise_name=ex.name,
            logged_at=logged_at or datetime.now(UTC),
        )
        s.add(row)
        await s.commit()
        await s.refresh(row)
        return row


async def get_last_log_for_exercise(exercise_id: int) -> WorkoutLog | None:
    _require_positive_id(exercise_id, "exerciseId")
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog)
            .where(WorkoutLog.exercise_id == exercise_id)
            .order_by(WorkoutLog.logged_at.desc(), WorkoutLog.id.desc())
            .limit(1)
        )
        return res.scalar_one_or_none()


async def get_last_grip_for_exercise(exercise_id: int) -> str | None:
    _require_positive_id(exercise_id, "exerciseId")
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog.grip)
            .where(WorkoutLog.exercise_id == exercise_id, WorkoutLog.grip.is_not(None))
            .order_by(WorkoutLog.logged_at.desc(), WorkoutLog.id.desc())
            .limit(1)
        )
        return res.scalar_one_or_none()


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_recent_sets_before(
    exercise_id: int, day: date, grip: str | None = None, limit: int = 10
) -> list[WorkoutLog]:
    """
    Most recent sets logged before ``day``, newest first, optionally for one grip.
    """
    _require_positive_id(exercise_id, "exerciseId")
    day_start, _ = _day_bounds(day)
    stmt = select(WorkoutLog).where(
        WorkoutLog.exercise_id == exercise_id, WorkoutLog.logged_at < day_start
    )
    if grip:
        stmt = stmt.where(WorkoutLog.grip == grip)
    stmt = stmt.order_by(WorkoutLog.logged_at.desc(), WorkoutLog.id.desc()).limit(limit)
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(stmt)
        return list(res.scalars().all())


async def get_today_logs(workout_id: int, day: date) -> list[WorkoutLog]:
    _require_positive_id(workout_id, "workoutId")
    start, end = _day_bounds(day)
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog)
            .where(
                WorkoutLog.workout_id == workout_id,
                WorkoutLog.logged_at >= start,
                WorkoutLog.logged_at < end,
            )
            .order_by(WorkoutLog.logged_at.asc(), WorkoutLog.id.asc())
        )
        return list(res.scalars().all())


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_workout_history(workout_id: int, limit: int = 8) -> list[HistorySession]:
    """
    Last ``limit`` sessions of a workout, newest first.

    Exercises are ordered by their slot in the workout and sets by set number.
    Logs whose exercise was deleted keep their snapshotted name.
    """
    _require_positive_id(workout_id, "workoutId")
    if not isinstance(limit, int) or limit <= 0 or limit > 100:
        raise ValidationError("limit must be a positive integer between 1 and 100")
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog, Exercise.name, Exercise.order_index)
            .join(Exercise, Exercise.id == WorkoutLog.exercise_id, isouter=True)
            .where(WorkoutLog.workout_id == workout_id)
            .order_by(WorkoutLog.logged_at.desc(), WorkoutLog.id.desc())
        )
        rows = res.all()

    grouped: dict[str, dict[str, Any]] = {}
    for log, ex_name, order_index in rows:
        key = log.logged_at.date().isoformat()
        if key not in grouped:
            if len(grouped) == limit:
                break
            grouped[key] = {"exercises": {}, "timestamps": []}
        bucket = grouped[key]
        bucket["timestamps"].append(log.logged_at)
        entry = bucket["exercises"].setdefault(
            log.exercise_id,
            {
                "exerciseId": log.exercise_id,
                "exerciseName": ex_name or log.exercise_name,
                "orderIndex": order_index if order_index is not None else 10_000,
                "sets": [],
            },
        )
        entry["sets"].append(
            {"id": log.id, "setNumber": log.set_number, "reps": log.reps, "weight": log.weight}
        )

    sessions: list[HistorySession] = []
    for key, bucket in grouped.items():
        exercises = sorted(bucket["exercises"].values(), key=lambda e: e["orderIndex"])
        sessions.append(
            HistorySession(
                date=key,
                duration_minutes=session_duration_minutes(bucket["timestamps"]),
                exercises=[
                    {
                        "exerciseId": e["exerciseId"],
                        "exerciseName": e["exerciseName"],
                        "sets": sorted(e["sets"], key=lambda x: x["setNumber"]),
                    }
                    for e in exercises
                ],
            )
        )
    return sessions


async def update_workout_log(log_id: int, reps: int, weight: float) -> WorkoutLog:
    _require_positive_id(log_id, "logId")
    if not isinstance(reps, int) or reps <= 0:
        raise ValidationError("reps must be a positive integer")
    if weight < 0:
        raise ValidationError("weight must be a non-negative number")
    sessmaker = get_session()
    async with sessmaker() as s:
        row = await s.get(WorkoutLog, log_id)
        if row is None:
            raise NotFoundError(f"Workout log with id {log_id} not found")
        row.reps = reps
        row.weight = weight
        await s.commit()
        return row


async def delete_workout_log(log_id: int) -> None:
    _require_positive_id(log_id, "logId")
    sessmaker = get_session()
    async with sessmaker() as s:
        row = await s.get(WorkoutLog, log_id)
        if row is None:
            raise NotFoundError(f"Workout log with id {log_id} not found")
        await s.delete(row)
        await s.commit()


async def get_exercise_history(exercise_id: int) -> list[dict[str, Any]]:
    """All sets of an exercise, oldest first, for charts."""
    _require_positive_id(exercise_id, "exerciseId")
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog)
            .where(WorkoutLog.exercise_id == exercise_id)
            .order_by(WorkoutLog.logged_at.asc(), WorkoutLog.id.asc())
        )
        return [
            {
                "date": log.logged_at.date().isoformat(),
                "setNumber": log.set_number,
                "reps": log.reps,
                "weight": float(log.weight),
            }
            for log in res.scalars()
        ]


async def get_exercise_average_reps_since(exercise_id: int, since: datetime) -> float | None:
    _require_positive_id(exercise_id, "exerciseId")
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(func.avg(WorkoutLog.reps)).where(
                WorkoutLog.exercise_id == exercise_id, WorkoutLog.logged_at >= since
            )
        )
        avg = res.scalar()
        return float(avg) if avg is not None else None


async def _export_rows(*conditions: Any) -> list[LogExportRow]:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutLog, Workout.name, Exercise.name)
            .join(Workout, Workout.id == WorkoutLog.workout_id)
            .join(Exercise, Exercise.id == WorkoutLog.exercise_id, isouter=True)
            .where(*conditions)
            .order_by(WorkoutLog.logged_at.asc(), WorkoutLog.id.asc())
        )
        return [
            LogExportRow(
                workout_name=workout_name,
                exercise_name=exercise_name or log.exercise_name or "",
                logged_at=log.logged_at,
                set_number=log.set_number,
                reps=log.reps,
                weight=float(log.weight),
            )
            for log, workout_name, exercise_name in res.all()
        ]


async def get_all_logs_for_export() -> list[LogExportRow]:
    return await _export_rows()


async def get_logs_for_date_range(start: datetime, end: datetime) -> list[LogExportRow]:
    return await _export_rows(WorkoutLog.logged_at >= start, WorkoutLog.logged_at <= end)
