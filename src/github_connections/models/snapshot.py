from __future__ import annotations

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

SORT_CARET = "►"


class SnapshotRow(BaseModel):
    """One exported table row, keyed by the column headers of the export."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    count: int = Field(alias="Count", ge=0)
    following: Optional[str] = Field(None, alias="Following")
    total_followers: Optional[int] = Field(None, alias="Total Followers")
    total_following: Optional[int] = Field(None, alias="Total Following")

    @model_validator(mode="before")
    @classmethod
    def strip_header_carets(cls, data: Any) -> Any:
        # Browser exports captured the sort caret as part of the header text.
        if isinstance(data, dict):
            return {
                key.replace(SORT_CARET, "").strip() if isinstance(key, str) else key: value
                for key, value in data.items()
            }
        return data

    @property
    def following_names(self) -> List[str]:
        if not self.following or self.following == "None":
            return []
        return [name.strip() for name in self.following.split(",") if name.strip()]

    def to_export(self) -> dict:
        return {
            "Name": self.name,
            "Following": self.following if self.following is not None else "None",
            "Count": str(self.count),
            "Total Followers": str(self.total_followers or 0),
            "Total Following": str(self.total_following or 0),
        }


class Snapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str
    rows: List[SnapshotRow] = Field(validation_alias=AliasChoices("data", "rows"))

    def to_export(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "data": [row.to_export() for row in self.rows],
        }


class DiffEntry(BaseModel):
    name: str
    before: int
    after: int
    delta: int


__all__ = ["Snapshot", "SnapshotRow", "DiffEntry"]
