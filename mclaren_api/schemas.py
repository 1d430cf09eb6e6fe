"""
Request body schemas.

Every field is optional at this layer: which fields are required is decided
by the repository against the storage model, so the same rules apply to HTTP
requests and to direct repository callers. Only fields the client actually
sent are copied onto the entity, so omitted fields keep their stored value on
update and their column default on create.
"""

from datetime import date
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from .models import Car, Driver, GrandPrix


class EntityPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entity_type: ClassVar[Any] = None

    def to_entity(self, id: int | None = None) -> Any:
        """Build a transient entity from the fields present in the request."""
        values = self.model_dump(exclude_unset=True)
        if id is not None:
            values["id"] = id
        return self.entity_type(**values)


class GrandPrixPayload(EntityPayload):
    entity_type = GrandPrix

    name: str | None = Field(default=None, max_length=120)
    location: str | None = Field(default=None, max_length=120)
    race_date: date | None = None
    laps: int | None = Field(default=None, ge=1)


class CarPayload(EntityPayload):
    entity_type = Car

    model: str | None = Field(default=None, max_length=50)
    season: int | None = Field(default=None, ge=1950)
    engine: str | None = Field(default=None, max_length=80)


class DriverPayload(EntityPayload):
    entity_type = Driver

    name: str | None = Field(default=None, max_length=120)
    number: int | None = Field(default=None, ge=0, le=99)
    nationality: str | None = Field(default=None, max_length=80)
    team: str | None = Field(default=None, max_length=80)
    car_id: int | None = None
