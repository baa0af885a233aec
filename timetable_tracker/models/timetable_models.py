"""Timetable domain SQLModel models."""

import datetime
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import JSON, Column, DateTime, Text, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from timetable_tracker.core.config import current_time

DAYS_PER_WEEK = 7


def empty_daily_status() -> List[bool]:
    return [False] * DAYS_PER_WEEK


# 日本語: 名前・時間帯・カテゴリで比較される値オブジェクト / English: Value object compared field-for-field
@dataclass(frozen=True)
class Activity:
    name: str
    time: str
    category: str

    def as_dict(self) -> dict:
        return {"name": self.name, "time": self.time, "category": self.category}


# 日本語: 利用者ごとの週間時間割（集約ルート） / English: Per-owner weekly timetable (aggregate root)
class Timetable(SQLModel, table=True):
    __tablename__ = "timetable"
    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_timetable_owner_name"),)

    id: int | None = Field(default=None, primary_key=True)
    owner_id: str = Field(max_length=64, index=True)
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)
    # 日本語: 時刻はすべて TIMETABLE_TIMEZONE の壁時計（タイムゾーンなし） / English: All timestamps are naive wall-clock time in TIMETABLE_TIMEZONE
    created_at: datetime.datetime = Field(
        default_factory=current_time, sa_column=Column(DateTime(timezone=False), nullable=False)
    )
    updated_at: datetime.datetime = Field(
        default_factory=current_time, sa_column=Column(DateTime(timezone=False), nullable=False)
    )

    default_activities: List["CatalogActivity"] = Relationship(
        back_populates="timetable",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "CatalogActivity.position"},
    )
    weeks: List["TimetableWeek"] = Relationship(
        back_populates="timetable",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "TimetableWeek.position"},
    )

    @property
    def current_week(self) -> Optional["TimetableWeek"]:
        for week in self.weeks:
            if week.is_current:
                return week
        return None

    @property
    def history(self) -> List["TimetableWeek"]:
        # 日本語: 古い順（最新が末尾） / English: Oldest first, newest last
        return sorted((week for week in self.weeks if not week.is_current), key=lambda week: week.position)

    @property
    def catalog(self) -> List[Activity]:
        return [item.activity for item in self.default_activities]


# 日本語: 新しい週の雛形になる既定アクティビティ / English: Catalog entry seeding every new week
class CatalogActivity(SQLModel, table=True):
    __tablename__ = "catalog_activity"

    id: int | None = Field(default=None, primary_key=True)
    timetable_id: int | None = Field(default=None, foreign_key="timetable.id", index=True)
    position: int = Field(default=0)
    name: str = Field(max_length=100)
    time: str = Field(max_length=11)
    category: str = Field(max_length=50)

    timetable: Optional[Timetable] = Relationship(back_populates="default_activities")

    @property
    def activity(self) -> Activity:
        return Activity(name=self.name, time=self.time, category=self.category)

    @classmethod
    def from_activity(cls, activity: Activity, position: int) -> "CatalogActivity":
        return cls(position=position, name=activity.name, time=activity.time, category=activity.category)


# 日本語: 1週間分のスナップショット（現在週または履歴） / English: One week snapshot, current or archived
class TimetableWeek(SQLModel, table=True):
    __tablename__ = "timetable_week"

    id: int | None = Field(default=None, primary_key=True)
    timetable_id: int | None = Field(default=None, foreign_key="timetable.id", index=True)
    position: int = Field(default=0)
    is_current: bool = Field(default=True)
    week_start_date: datetime.datetime = Field(sa_column=Column(DateTime(timezone=False), nullable=False))
    week_end_date: datetime.datetime = Field(sa_column=Column(DateTime(timezone=False), nullable=False))
    overall_completion_rate: float = Field(default=0.0)
    notes: str | None = Field(default=None, sa_column=Column(Text))

    timetable: Optional[Timetable] = Relationship(back_populates="weeks")
    activities: List["DailyProgress"] = Relationship(
        back_populates="week",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "DailyProgress.position"},
    )


# 日本語: アクティビティ毎の曜日別達成状況(0=月 ... 6=日) / English: Per-activity completion flags (0=Mon ... 6=Sun)
class DailyProgress(SQLModel, table=True):
    __tablename__ = "daily_progress"

    id: int | None = Field(default=None, primary_key=True)
    week_id: int | None = Field(default=None, foreign_key="timetable_week.id", index=True)
    position: int = Field(default=0)
    name: str = Field(max_length=100)
    time: str = Field(max_length=11)
    category: str = Field(max_length=50)
    daily_status: List[bool] = Field(default_factory=empty_daily_status, sa_column=Column(JSON, nullable=False))
    completion_rate: float = Field(default=0.0)

    week: Optional[TimetableWeek] = Relationship(back_populates="activities")

    @property
    def activity(self) -> Activity:
        return Activity(name=self.name, time=self.time, category=self.category)

    @classmethod
    def from_activity(
        cls,
        activity: Activity,
        position: int,
        daily_status: List[bool] | None = None,
        completion_rate: float = 0.0,
    ) -> "DailyProgress":
        return cls(
            position=position,
            name=activity.name,
            time=activity.time,
            category=activity.category,
            daily_status=list(daily_status) if daily_status is not None else empty_daily_status(),
            completion_rate=completion_rate,
        )
