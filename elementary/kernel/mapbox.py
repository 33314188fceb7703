"""
Elementary Kernel: Map Widget

Maps are the one widget that cannot be produced as markup: the interactive
instance has to attach to a container that already exists in the document.
The compiler returns a placeholder element and registers `attach_map(...)` as a
deferred callback; the render driver runs it after the placeholder has been
rendered.

There is no cancellation. If a later render drops the placeholder before the
callback runs, the callback still runs; DocumentMapWidget logs the stale
container and attaches anyway.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, Field

from elementary.kernel.dom import Document

logger = logging.getLogger(__name__)

STYLE_URL_TEMPLATE = "mapbox://styles/mapbox/{style}-v9"


class LngLat(BaseModel):
    lon: float
    lat: float

    def as_pair(self) -> list[float]:
        return [self.lon, self.lat]


class MapConfig(BaseModel):
    """Everything needed to construct one map instance."""

    container: str = Field(min_length=1)
    center: LngLat
    markers: list[LngLat] = Field(default_factory=list)
    style: str = "streets"
    zoom: float = 0
    access_token: str = ""

    @property
    def style_url(self) -> str:
        return STYLE_URL_TEMPLATE.format(style=self.style)


class MapWidget(Protocol):
    def create(self, config: MapConfig) -> Any: ...

    def add_marker(self, map_instance: Any, marker: LngLat) -> Any: ...


@dataclass
class MapInstance:
    """A constructed map, as attached to a Document."""

    container: str
    style: str
    zoom: float
    center: list[float]
    access_token: str = ""
    markers: list[list[float]] = field(default_factory=list)


class DocumentMapWidget:
    """Attaches map instances to a Document's widgets, keyed by container id."""

    def __init__(self, document: Document) -> None:
        self.document = document

    def create(self, config: MapConfig) -> MapInstance:
        if not self.document.has_element(config.container):
            logger.warning("map: container %r is not in the document", config.container)
        instance = MapInstance(
            container=config.container,
            style=config.style_url,
            zoom=config.zoom,
            center=config.center.as_pair(),
            access_token=config.access_token,
        )
        self.document.widgets[config.container] = instance
        return instance

    def add_marker(self, map_instance: MapInstance, marker: LngLat) -> None:
        map_instance.markers.append(marker.as_pair())


def attach_map(config: MapConfig, widget: MapWidget):
    """The deferred callback for one map placeholder."""

    def attach() -> None:
        instance = widget.create(config)
        for marker in config.markers:
            widget.add_marker(instance, marker)

    return attach
