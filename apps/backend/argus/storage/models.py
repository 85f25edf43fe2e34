from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from argus.config.defaults import DEFAULT_RETENTION_DAYS


class Entity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Camera(Entity):
    id: str
    name: str
    description: str = ""
    stream_url: str = Field(default="", alias="streamUrl")
    thumbnail_url: str = Field(default="", alias="thumbnailUrl")
    server: str | None = None


class LayoutGrid(Entity):
    rows: int = Field(ge=1)
    cols: int = Field(ge=1)
    cameras: list[str | None] = Field(default_factory=list)

    @model_validator(mode="after")
    def cell_count_matches(self) -> LayoutGrid:
        expected = self.rows * self.cols
        if len(self.cameras) != expected:
            msg = f"grid expects {expected} cells, got {len(self.cameras)}"
            raise ValueError(msg)
        return self

    def to_json(self) -> dict[str, Any]:
        # empty cells must survive as explicit nulls
        return self.model_dump(mode="json", by_alias=True)


class Layout(Entity):
    id: str
    name: str
    grid: LayoutGrid

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "grid": self.grid.to_json()}


class Recording(Entity):
    id: str
    # kept as text so malformed values survive a load/save cycle
    timestamp: str
    camera_name: str = Field(alias="cameraName")
    title: str
    summary: str
    video_data_uri: str = Field(alias="videoDataUri")


EventType = Literal["Recording", "Object Detection"]


class Event(Entity):
    id: str
    timestamp: str
    type: EventType
    camera_name: str = Field(alias="cameraName")
    description: str
    reference_id: str | None = Field(default=None, alias="referenceId")


Role = Literal["admin", "viewer"]


class User(Entity):
    id: str
    username: str
    password: str | None = None
    role: Role = "viewer"

    def session(self) -> ActiveUser:
        return ActiveUser(id=self.id, username=self.username, role=self.role)


class ActiveUser(Entity):
    id: str
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class StorageConfig(Entity):
    retention_days: int = Field(default=DEFAULT_RETENTION_DAYS, alias="retentionDays")

    @field_validator("retention_days", mode="before")
    @classmethod
    def non_negative_whole_days(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            elif isinstance(value, str) and value.strip().isdigit():
                value = int(value.strip())
            else:
                msg = "retentionDays must be a whole number of days"
                raise ValueError(msg)
        if value < 0:
            msg = "retentionDays cannot be negative"
            raise ValueError(msg)
        return value
