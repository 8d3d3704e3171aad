"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LocationModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    parent_id: Optional[str] = Field(
        default=None,
        alias="parentId",
        description="Id of the place this point of interest belongs to.",
    )


class EndPointConfig(BaseModel):
    type: Optional[str] = None


class RouteConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    end_point: Optional[EndPointConfig] = Field(default=None, alias="endPoint")


class OptimizeRouteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    locations: List[LocationModel]
    mode: Optional[Literal["driving", "walking", "bicycling", "transit"]] = None
    cost_matrix: Optional[List[List[Optional[float]]]] = Field(
        default=None,
        alias="costMatrix",
        description="Place-to-place travel seconds. Skips the provider lookup when given.",
    )
    lock_endpoint: bool = Field(
        default=False,
        alias="lockEndpoint",
        description="Keep the last place of the request at the end of the tour.",
    )
    endpoint_id: Optional[str] = Field(
        default=None,
        alias="endpointId",
        description="Location that must close the place-level tour. Takes precedence over lockEndpoint.",
    )
    config: Optional[RouteConfig] = None


class OptimizeRouteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    optimized_path: List[LocationModel] = Field(alias="optimizedPath")
    metadata: dict


class Coordinate(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class DistanceMatrixRequest(BaseModel):
    origins: Optional[List[Coordinate]] = None
    destinations: Optional[List[Coordinate]] = None
    mode: Optional[Literal["driving", "walking", "bicycling", "transit"]] = None
