"""
Exam location map.

The map widget itself is an external service reached through MapRenderer.
ExamMapView decides what to draw: one marker per session with usable
coordinates, centred on the first of them. OneShotLoader guards the widget's
one-time initialization.
"""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, NamedTuple, Protocol, TypeVar

from examdesk.config import get_settings
from examdesk.schemas.sessions import ExamSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatLng(NamedTuple):
    lat: float
    lng: float


DEFAULT_CENTER = LatLng(20.0, 0.0)
DEFAULT_ZOOM = 4


class MapMarker(NamedTuple):
    title: str
    latitude: float
    longitude: float

    @property
    def position(self) -> LatLng:
        return LatLng(self.latitude, self.longitude)


class MapRenderer(Protocol):
    """What the view needs from a map widget."""

    def create_map(self, center: LatLng, zoom: int) -> None: ...

    def pan_to(self, center: LatLng) -> None: ...

    def add_marker(self, marker: MapMarker) -> Any:
        """Draw a marker and return a handle for remove_marker()."""
        ...

    def remove_marker(self, handle: Any) -> None: ...


def _has_coordinates(session: ExamSession) -> bool:
    return math.isfinite(session.location.latitude) and math.isfinite(session.location.longitude)


def build_markers(sessions: Iterable[ExamSession]) -> list[MapMarker]:
    """One marker per session with finite coordinates, in session order."""
    return [
        MapMarker(s.title, s.location.latitude, s.location.longitude)
        for s in sessions
        if _has_coordinates(s)
    ]


def map_center(sessions: Iterable[ExamSession]) -> LatLng:
    """Position of the first session with finite coordinates, else the world view."""
    first = next((s for s in sessions if _has_coordinates(s)), None)
    if first is None:
        return DEFAULT_CENTER
    return LatLng(first.location.latitude, first.location.longitude)


class OneShotLoader(Generic[T]):
    """
    Run an async initializer at most once and share its result.

    Callbacks registered with on_ready() run once when the initializer
    succeeds, or immediately if it already has. If the initializer fails,
    waiters see the error and the next wait() starts a fresh attempt.
    """

    def __init__(self, initializer: Callable[[], Awaitable[T]]) -> None:
        self._initializer = initializer
        self._future: asyncio.Future[T] | None = None
        self._callbacks: list[Callable[[T], None]] = []

    def _resolved(self) -> "asyncio.Future[T] | None":
        """The initialization future if it completed successfully, else None."""
        future = self._future
        if future is None or not future.done() or future.cancelled() or future.exception() is not None:
            return None
        return future

    @property
    def ready(self) -> bool:
        return self._resolved() is not None

    def on_ready(self, callback: Callable[[T], None]) -> None:
        future = self._resolved()
        if future is None:
            self._callbacks.append(callback)
        else:
            callback(future.result())

    async def wait(self) -> T:
        """Start the initializer if needed and wait for its result."""
        if self._future is None:
            self._future = asyncio.ensure_future(self._run())
        # shield: one waiter giving up must not cancel the shared initialization
        return await asyncio.shield(self._future)

    async def _run(self) -> T:
        try:
            value = await self._initializer()
        except Exception:
            logger.exception("Map initialization failed")
            self._future = None
            raise
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(value)
        return value


class ExamMapView:
    """
    Keeps a map widget in sync with the loaded sessions.

    Markers are fully replaced on every render; there is no diffing.
    """

    def __init__(self, loader: OneShotLoader[MapRenderer]) -> None:
        self._loader = loader
        self._renderer: MapRenderer | None = None
        self._handles: list[Any] = []
        self.sessions: list[ExamSession] = []

    @property
    def is_ready(self) -> bool:
        return self._renderer is not None

    @property
    def marker_count(self) -> int:
        return len(self._handles)

    async def start(self) -> None:
        """Initialize the widget, then draw whatever sessions are already set."""
        renderer = await self._loader.wait()
        if self._renderer is None:
            self._renderer = renderer
            renderer.create_map(map_center(self.sessions), DEFAULT_ZOOM)
            self._draw_markers(renderer)

    def render(self, sessions: Iterable[ExamSession]) -> None:
        """Show a new set of sessions. Before start() completes this only records them."""
        self.sessions = list(sessions)
        renderer = self._renderer
        if renderer is None:
            return
        renderer.pan_to(map_center(self.sessions))
        self._draw_markers(renderer)

    def _draw_markers(self, renderer: MapRenderer) -> None:
        for handle in self._handles:
            renderer.remove_marker(handle)
        self._handles = [renderer.add_marker(m) for m in build_markers(self.sessions)]


def create_map_loader(
    load_renderer: Callable[[str], Awaitable[MapRenderer]],
    api_key: str | None = None,
) -> OneShotLoader[MapRenderer] | None:
    """
    Build the loader for the map widget SDK.

    Returns None, after logging a warning, when no maps API key is configured;
    the map is then never shown.
    """
    api_key = api_key or get_settings().maps_api_key
    if not api_key:
        logger.warning("Missing maps API key. Map will not load.")
        return None
    return OneShotLoader(lambda: load_renderer(api_key))
