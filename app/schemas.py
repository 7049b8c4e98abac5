from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SystemRef = Union[int, str]


class WktRequest(BaseModel):
    wkt: str = Field(min_length=1, description="OGC WKT of a coordinate system or math transform")


class SystemSummary(BaseModel):
    """Shape of a coordinate system as reported by the API."""

    name: str
    kind: str
    dimension: int
    authority: Optional[str] = None
    authority_code: Optional[int] = None
    axes: List[Dict[str, str]] = Field(default_factory=list)
    projection: Optional[str] = None
    parameters: Optional[Dict[str, float]] = None
    datum: Optional[str] = None
    angular_unit: Optional[str] = None
    linear_unit: Optional[str] = None
    prime_meridian: Optional[str] = None


class WktParseResponse(BaseModel):
    kind: str
    wkt: str
    summary: Optional[SystemSummary] = None
    dim_source: Optional[int] = None
    dim_target: Optional[int] = None


class CrsResponse(BaseModel):
    srid: int
    wkt: str
    summary: SystemSummary


class RegisterRequest(BaseModel):
    srid: Optional[int] = Field(default=None, description="Defaults to the AUTHORITY code of the WKT")
    wkt: str = Field(min_length=1)


class TransformRequest(BaseModel):
    """Points between two systems, each given as an srid or as WKT."""

    source: SystemRef
    target: SystemRef
    points: List[List[float]]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"source": 25832, "target": 3857, "points": [[500000.0, 5560000.0]]}
        }
    )

    @field_validator("points")
    @classmethod
    def _check_points(cls, v: List[List[float]]) -> List[List[float]]:
        for p in v:
            if len(p) not in (2, 3):
                raise ValueError("each point needs 2 or 3 ordinates")
        return v


class TransformResponse(BaseModel):
    points: List[List[float]]
    legs: int
    cached: bool = False


class PipelineRequest(BaseModel):
    source: SystemRef
    target: SystemRef


class PipelineLeg(BaseModel):
    index: int
    type: str
    dim_source: int
    dim_target: int
    inverse: bool
    identity: bool
    wkt: Optional[str] = None


class PipelineResponse(BaseModel):
    legs: List[PipelineLeg]
    wkt: Optional[str] = None


class ShiftRequest(BaseModel):
    path: str
    points: List[List[float]] = Field(description="(longitude, latitude) pairs in degrees, positive east")
    inverse: bool = False

    @model_validator(mode="after")
    def _check(self) -> "ShiftRequest":
        if any(len(p) != 2 for p in self.points):
            raise ValueError("shift points are (longitude, latitude) pairs")
        return self


class ShiftResponse(BaseModel):
    # None where no sub-grid covers the point
    points: List[Optional[List[float]]]


class GridInspectResponse(BaseModel):
    source: str
    header: Dict[str, Any]
    grids: List[Dict[str, Any]]


__all__ = [
    "WktRequest",
    "SystemSummary",
    "WktParseResponse",
    "CrsResponse",
    "RegisterRequest",
    "TransformRequest",
    "TransformResponse",
    "PipelineRequest",
    "PipelineLeg",
    "PipelineResponse",
    "ShiftRequest",
    "ShiftResponse",
    "GridInspectResponse",
]
