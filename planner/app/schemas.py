from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator


class Task(BaseModel):
    """A dated, timed to-do item as returned by every task store backend."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    date: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    completed: bool = False


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    description: str = ""
    date: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    completed: StrictBool = False


class TaskUpdate(BaseModel):
    """Merge patch: only fields present in the request body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    completed: Optional[StrictBool] = None

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None and key != "id")
            if nulls:
                raise ValueError(f"fields may not be null: {', '.join(nulls)}")
        return data

    def changes(self) -> dict[str, Any]:
        """Return the supplied fields keyed by attribute name."""

        return self.model_dump(exclude_unset=True)


class TaskStats(BaseModel):
    completed: int = 0
    pending: int = 0
    total: int = 0


class WeekDay(BaseModel):
    date: str
    tasks: list[Task]


class WeekOverview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    days: list[WeekDay]
    stats: TaskStats
