from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from geo.types import DEFAULT_VIEWPORT, Coordinate, Span, Viewport
from gyms.types import GymPoint

_LOCATION_FIELDS = {"id", "latitude", "longitude"}


class GymRecord(BaseModel):
    """
    A gym as posted by the app. Unknown fields are kept and forwarded as display props.
    """

    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    name: str = ""
    # Optional: records without a usable location are simply never shown.
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None

    def to_point(self) -> GymPoint:
        props = {
            k: v
            for k, v in self.model_dump().items()
            if k not in _LOCATION_FIELDS
        }
        return GymPoint(
            id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            props=props,
        )


class ApiCoordinate(BaseModel):
    lat: float
    lon: float

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon)


class ApiSpan(BaseModel):
    latDelta: float = Field(gt=0.0, le=180.0)
    lonDelta: float = Field(gt=0.0, le=360.0)


class ApiViewport(BaseModel):
    center: ApiCoordinate = ApiCoordinate(
        lat=DEFAULT_VIEWPORT.center.lat, lon=DEFAULT_VIEWPORT.center.lon
    )
    span: ApiSpan = ApiSpan(
        latDelta=DEFAULT_VIEWPORT.span.lat_delta, lonDelta=DEFAULT_VIEWPORT.span.lon_delta
    )

    def to_viewport(self) -> Viewport:
        return Viewport(
            center=self.center.to_coordinate(),
            span=Span(lat_delta=self.span.latDelta, lon_delta=self.span.lonDelta),
        )


class ApiScreen(BaseModel):
    # Defaults: a typical phone map in points.
    width: float = Field(default=390.0, gt=0.0)
    height: float = Field(default=844.0, gt=0.0)
    heading: float = 0.0


class ClustersRequest(BaseModel):
    points: list[GymRecord] = Field(default_factory=list)
    viewport: ApiViewport = Field(default_factory=ApiViewport)
    pinnedId: Union[int, str, None] = None
    screen: ApiScreen = Field(default_factory=ApiScreen)
    projection: Literal["linear", "mercator"] | None = None


class ZoomRequest(BaseModel):
    # Ids of the tapped marker; defaults to the ids of `members`.
    memberIds: list[Union[int, str]] | None = None
    members: list[GymRecord] = Field(default_factory=list)
    coordinate: ApiCoordinate
    viewport: ApiViewport = Field(default_factory=ApiViewport)
