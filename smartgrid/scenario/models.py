from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, PositiveFloat, conint, field_validator, model_validator

from ..resources.request import PriorityClass


class SubstationSpec(BaseModel):
    id: str = Field(..., min_length=1, description="Substation identifier.")
    capacity_mw: PositiveFloat = Field(..., description="Substation capacity (MW).")


class RequestSpec(BaseModel):
    consumer_id: str = Field(..., min_length=1, description="Consumer identifier.")
    priority_class: PriorityClass = Field(
        ..., description="res/com/ind, residential/commercial/industrial, or weight 1-3."
    )
    megawatts: PositiveFloat = Field(..., description="Requested power (MW).")
    submit_at_seconds: conint(ge=0) = Field(
        0, description="Offset from scenario start at which the request is submitted."
    )

    @field_validator("priority_class", mode="before")
    @classmethod
    def _parse_class(cls, v):
        # InvalidClass is a ValueError, so pydantic reports it as a validation error
        return PriorityClass.parse(v)


class MaintenanceSpec(BaseModel):
    substation_id: str = Field(..., min_length=1, description="Target substation.")
    start_delay_seconds: conint(ge=0) = Field(
        ..., description="Delay from scheduling time until the 1h window starts."
    )
    schedule_at_seconds: conint(ge=0) = Field(
        0, description="Offset from scenario start at which the job is scheduled."
    )


class ScenarioSpec(BaseModel):
    name: str = Field("GridScenario", description="Scenario name.")
    start: Optional[datetime] = Field(
        None, description="Scenario start instant. Defaults to the current time."
    )
    substations: Optional[List[SubstationSpec]] = Field(
        None, description="Substations in allocation order. Defaults to configured substations."
    )
    requests: List[RequestSpec] = Field(default_factory=list)
    maintenance: List[MaintenanceSpec] = Field(default_factory=list)
    passes: List[conint(ge=0)] = Field(
        default_factory=lambda: [0],
        description="Offsets (seconds from start) at which scheduling passes run.",
    )

    @model_validator(mode="after")
    def _check_references(self) -> "ScenarioSpec":
        if self.substations is not None:
            ids = [s.id for s in self.substations]
            if len(ids) != len(set(ids)):
                raise ValueError("substation ids must be unique")
            unknown = {m.substation_id for m in self.maintenance} - set(ids)
            if unknown:
                raise ValueError(f"maintenance references unknown substations: {sorted(unknown)}")
        return self
