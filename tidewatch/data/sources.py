"""Async loading of the graph document and the projection map.

Both documents are JSON and may live on disk or behind an http(s) URL.
The two startup loads run concurrently; the graph load is fatal on
failure, the projection load degrades to an empty map.

Usage::

    source = DataSource(timeout=30)
    document, projection = await source.load_all(
        "MC1_cleaned.json", "https://example.org/MC1_out_vessel_pca.json",
    )
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from pathlib import Path
from typing import Any

import httpx

from tidewatch.errors import GraphLoadError, ProjectionLoadError

logger = logging.getLogger(__name__)

ProjectionMap = dict[str, tuple[float, float]]


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def parse_projection(document: Any) -> ProjectionMap:
    """Strict parse of an ``{id: [x, y]}`` document.

    Entries whose value is not a pair of finite numbers are skipped.

    Raises
    ------
    ProjectionLoadError
        If the document is not a JSON object.
    """
    if not isinstance(document, dict):
        raise ProjectionLoadError(
            f"Projection document must be an object, got {type(document).__name__}"
        )

    projection: ProjectionMap = {}
    skipped = 0
    for key, coords in document.items():
        point = _point(coords)
        if point is None:
            skipped += 1
            continue
        projection[str(key)] = point

    if skipped:
        logger.debug("Skipped %d malformed projection entries", skipped)
    return projection


def _point(coords: Any) -> tuple[float, float] | None:
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    x, y = coords[0], coords[1]
    if isinstance(x, bool) or isinstance(y, bool):
        return None
    if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return (float(x), float(y))


class DataSource:
    """Fetch JSON documents from local paths or http(s) URLs.

    Parameters
    ----------
    timeout:
        HTTP timeout in seconds.
    transport:
        Optional httpx transport (tests pass an ``httpx.MockTransport``).
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def fetch_json(self, location: str) -> Any:
        """Read and decode one JSON document."""
        if is_url(location):
            async with self._client() as client:
                resp = await client.get(location)
                resp.raise_for_status()
                return resp.json()

        text = await asyncio.to_thread(Path(location).read_text, encoding="utf-8")
        return json.loads(text)

    async def load_graph(self, location: str) -> Any:
        """Fetch the graph document.

        Raises
        ------
        GraphLoadError
            If the source is unreachable or not valid JSON.
        """
        try:
            document = await self.fetch_json(location)
        except (httpx.HTTPError, OSError, ValueError) as exc:
            logger.error("Data loading failed: %s", exc)
            raise GraphLoadError(f"Could not load graph data from {location}: {exc}") from exc
        logger.info("Graph document loaded from %s", location)
        return document

    async def load_projection(self, location: str | None) -> ProjectionMap:
        """Fetch the projection map; any failure yields an empty map."""
        if not location:
            return {}
        try:
            document = await self.fetch_json(location)
            projection = parse_projection(document)
        except (httpx.HTTPError, OSError, ValueError, ProjectionLoadError) as exc:
            logger.warning("Failed to load projection data from %s: %s", location, exc)
            return {}
        logger.info("Projection data loaded: %d coordinate points", len(projection))
        return projection

    async def load_all(
        self,
        graph_location: str,
        projection_location: str | None,
    ) -> tuple[Any, ProjectionMap]:
        """Load both documents concurrently."""
        document, projection = await asyncio.gather(
            self.load_graph(graph_location),
            self.load_projection(projection_location),
        )
        return document, projection
