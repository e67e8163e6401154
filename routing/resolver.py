"""
Purpose: Route Path Resolver.
What it does:
- Resolves the road path of a trip unit against the Free (OSRM) or Precision
  (OpenRouteService) provider
- DIRECT units: one two-point call, cached per (origin, destination), broken
  down into named road segments
- MILK_RUN / ROUND_TRIP units: one multi-waypoint call, cached per unit, with
  per-hop distance/duration lined up with the unit's waypoints
- Batches: fixed-size chunks resolved concurrently, chunks run one after the
  other, Free chunks spaced out by a fixed delay

A failed unit never aborts a batch: it is logged, its cache entry is marked
RESOLVE_FAILED and the batch moves on. Retrying is the caller's call.

Rule: The resolver owns its cache. Schedule logic lives in timeline/.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from network.models import Facility, LatLon, Leg
from trips.models import TripKind, TripUnit

from .cache import CacheKey, PathCache
from .errors import PathResolutionError, ProviderLockedError, RouteProviderError, UnknownFacilityError
from .models import (
    BatchOutcome,
    PathLeg,
    ResolutionState,
    ResolvedPath,
    RoadSegment,
    RoutingProvider,
)
from .policy import ResolverPolicy, default_resolver_policy

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

UNNAMED_ROAD = "Unnamed road"


class CancellationToken:
    """
    Cooperative cancel flag for batch_resolve.
    In-flight calls of the current chunk still finish; no new chunk starts.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def road_segments(route: Dict[str, Any]) -> List[RoadSegment]:
    """
    Groups a route's steps by road name, in order of first appearance,
    summing distance and time per road.
    """
    totals: Dict[str, List[float]] = {}
    for leg in route.get("legs", []):
        for step in leg.get("steps", []):
            distance = step.get("distance", 0.0)
            duration = step.get("duration", 0.0)
            if not distance and not duration:
                # arrive/depart markers
                continue
            name = (step.get("name") or "").strip() or UNNAMED_ROAD
            bucket = totals.setdefault(name, [0.0, 0.0])
            bucket[0] += distance
            bucket[1] += duration

    return [
        RoadSegment(name=name, distance_m=distance, duration_s=duration)
        for name, (distance, duration) in totals.items()
    ]


def checked_route(route: Any) -> Dict[str, Any]:
    """
    Validates a client's normalized route dict.
    Raises RouteProviderError when a field is missing or has the wrong type.
    """
    try:
        return {
            "geometry": list(route.get("geometry") or []),
            "distance": float(route["distance"]),
            "duration": float(route["duration"]),
            "legs": [
                {
                    "distance": float(leg["distance"]),
                    "duration": float(leg["duration"]),
                    "steps": [dict(step) for step in leg.get("steps") or []],
                }
                for leg in route.get("legs") or []
            ],
        }
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise RouteProviderError(f"Malformed route payload: {e!r}") from e


def collapse_waypoints(coordinates: List[LatLon]) -> Tuple[List[LatLon], List[int]]:
    """
    Drops consecutive duplicate coordinates.

    Returns the collapsed list and, for every input coordinate, its index in
    the collapsed list.
    """
    collapsed: List[LatLon] = []
    positions: List[int] = []
    for coordinate in coordinates:
        if not collapsed or collapsed[-1] != coordinate:
            collapsed.append(coordinate)
        positions.append(len(collapsed) - 1)
    return collapsed, positions


class RoutePathResolver:
    """
    Resolves and caches road paths for trip units.

    Args:
        facilities: name -> Facility lookup used to turn waypoints into coordinates
        providers: RoutingProvider -> client exposing compute_route(points, *, steps=False)
            (OSRMClient, ORSClient or a test double)
        cache: injectable PathCache; a bounded one is built from the policy if omitted
        precision_unlocked: capability flag from routing.access.unlock_precision
        sleep: used for the inter-chunk delay

    Multi-stop units are resolved over their routable view: legs touching an
    unknown facility are left out of the waypoint list.
    """

    def __init__(
        self,
        facilities: Mapping[str, Facility],
        providers: Mapping[RoutingProvider, Any],
        *,
        cache: Optional[PathCache] = None,
        policy: Optional[ResolverPolicy] = None,
        precision_unlocked: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.policy = policy if policy is not None else default_resolver_policy()
        self.policy.validate()
        self.facilities = facilities
        self.providers = dict(providers)
        # an empty PathCache is falsy (__len__), compare with None
        if cache is None:
            cache = PathCache(
                max_entries=self.policy.cache_max_entries,
                ttl_seconds=self.policy.cache_ttl_seconds,
            )
        self.cache = cache
        self.precision_unlocked = precision_unlocked
        self._sleep = sleep

    # --- Internal helpers ---

    def _client(self, provider: RoutingProvider):
        if provider == RoutingProvider.PRECISION and not self.precision_unlocked:
            raise ProviderLockedError("Precision routing is locked; unlock it with the passkey first.")
        client = self.providers.get(provider)
        if client is None:
            raise PathResolutionError(f"No client configured for provider {provider.value}")
        return client

    def _coordinates(self, names: List[str]) -> List[LatLon]:
        coordinates = []
        for name in names:
            facility = self.facilities.get(name)
            if facility is None:
                raise UnknownFacilityError(f"Unknown facility: {name}")
            coordinates.append(facility.location)
        return coordinates

    def _routable(self, unit: TripUnit) -> TripUnit:
        # nothing routable: keep the unit so the lookup fails on its unknown stop
        return unit.routable_view(self.facilities) or unit

    def cache_key(self, unit: TripUnit, provider: RoutingProvider) -> CacheKey:
        if unit.kind == TripKind.DIRECT:
            leg = unit.outbound[0]
            return ("pair", provider, leg.origin, leg.destination)
        return ("unit", provider, self._routable(unit).unit_key)

    def state(self, unit: TripUnit, provider: RoutingProvider = RoutingProvider.FREE) -> ResolutionState:
        return self.cache.state(self.cache_key(unit, provider))

    def cached_path(self, unit: TripUnit, provider: RoutingProvider = RoutingProvider.FREE) -> Optional[ResolvedPath]:
        return self.cache.get(self.cache_key(unit, provider))

    # --- Public API ---

    def resolve_direct(self, leg: Leg, provider: RoutingProvider = RoutingProvider.FREE) -> ResolvedPath:
        """
        Single origin -> destination resolution with a road-by-road breakdown.
        """
        key = ("pair", provider, leg.origin, leg.destination)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Path cache hit: {leg.origin} -> {leg.destination}")
            return cached

        try:
            client = self._client(provider)
            coordinates = self._coordinates([leg.origin, leg.destination])
            self.cache.mark_resolving(key)
            route = checked_route(client.compute_route(coordinates, steps=True))
        except PathResolutionError as e:
            logger.warning(f"Could not resolve {leg.origin} -> {leg.destination} ({provider.value}): {e}")
            self.cache.mark_failed(key, str(e))
            raise

        path = ResolvedPath(
            provider=provider,
            geometry=route["geometry"],
            distance_m=route["distance"],
            duration_s=route["duration"],
            legs=[PathLeg(distance_m=route["distance"], duration_s=route["duration"])],
            segments=road_segments(route),
        )
        return self.cache.store(key, path)

    def resolve_multi_stop(self, unit: TripUnit, provider: RoutingProvider = RoutingProvider.FREE) -> ResolvedPath:
        """
        One multi-waypoint call for the whole unit.

        Consecutive duplicate coordinates are collapsed before the call; the
        returned path still has one PathLeg per waypoint hop (zero for the
        collapsed ones) so the timeline can index hops by stop position.
        """
        key = self.cache_key(unit, provider)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Path cache hit: {unit.unit_key}")
            return cached

        view = self._routable(unit)
        if view is not unit:
            logger.info(f"{unit.unit_key}: leaving out {len(unit.legs) - len(view.legs)} leg(s) with unknown facilities")
        names = view.waypoints()
        try:
            client = self._client(provider)
            coordinates = self._coordinates(names)
            self.cache.mark_resolving(key)

            collapsed, positions = collapse_waypoints(coordinates)
            if len(collapsed) < 2:
                # every stop sits on the same point, nothing to drive
                path = ResolvedPath(
                    provider=provider,
                    geometry=list(collapsed),
                    distance_m=0.0,
                    duration_s=0.0,
                    legs=[PathLeg(0.0, 0.0) for _ in range(len(names) - 1)],
                )
                return self.cache.store(key, path)

            route = checked_route(client.compute_route(collapsed))
            provider_legs = route["legs"]
            if len(provider_legs) != len(collapsed) - 1:
                raise RouteProviderError(
                    f"Expected {len(collapsed) - 1} route legs, provider returned {len(provider_legs)}"
                )
        except PathResolutionError as e:
            logger.warning(f"Could not resolve {unit.unit_key} ({provider.value}): {e}")
            self.cache.mark_failed(key, str(e))
            raise

        hops: List[PathLeg] = []
        for index in range(len(names) - 1):
            here, there = positions[index], positions[index + 1]
            if here == there:
                hops.append(PathLeg(0.0, 0.0))
                continue
            hop = provider_legs[here]
            hops.append(PathLeg(distance_m=hop["distance"], duration_s=hop["duration"]))

        path = ResolvedPath(
            provider=provider,
            geometry=route["geometry"],
            distance_m=route["distance"],
            duration_s=route["duration"],
            legs=hops,
        )
        return self.cache.store(key, path)

    def resolve(self, unit: TripUnit, provider: RoutingProvider = RoutingProvider.FREE) -> ResolvedPath:
        if unit.kind == TripKind.DIRECT:
            return self.resolve_direct(unit.outbound[0], provider)
        return self.resolve_multi_stop(unit, provider)

    def _resolve_outcome(self, unit: TripUnit, provider: RoutingProvider) -> BatchOutcome:
        try:
            path = self.resolve(unit, provider)
        except PathResolutionError as e:
            # already logged and marked failed by resolve_*
            return BatchOutcome(unit_key=unit.unit_key, state=ResolutionState.RESOLVE_FAILED, error=str(e))
        return BatchOutcome(unit_key=unit.unit_key, state=ResolutionState.RESOLVED, path=path)

    def batch_resolve(
        self,
        units: Iterable[TripUnit],
        provider: RoutingProvider = RoutingProvider.FREE,
        *,
        chunk_size: Optional[int] = None,
        cancel: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Iterator[BatchOutcome]:
        """
        Resolve many units, streaming one BatchOutcome per unit in input order.

        - `chunk_size` units run concurrently; the next chunk starts only when
          the whole chunk is done
        - Free provider: fixed delay between chunks (policy.free_chunk_delay_seconds)
        - `cancel`: checked before every chunk; units not started are yielded
          as UNRESOLVED
        - `on_progress(completed, total)` after every chunk
        """
        units = list(units)
        size = chunk_size or self.policy.chunk_size
        if size <= 0:
            raise ValueError("chunk_size must be > 0")

        if provider == RoutingProvider.FREE:
            delay = self.policy.free_chunk_delay_seconds
        else:
            delay = self.policy.precision_chunk_delay_seconds

        total = len(units)
        completed = 0

        for start in range(0, total, size):
            if cancel is not None and cancel.cancelled:
                remaining = units[start:]
                logger.info(f"Batch cancelled: {len(remaining)} of {total} units left unresolved")
                for unit in remaining:
                    self.cache.mark_unresolved(self.cache_key(unit, provider))
                    yield BatchOutcome(unit_key=unit.unit_key, state=ResolutionState.UNRESOLVED)
                return

            chunk = units[start:start + size]
            for unit in chunk:
                self.cache.mark_resolving(self.cache_key(unit, provider))

            try:
                with ThreadPoolExecutor(max_workers=len(chunk)) as pool:
                    futures = [pool.submit(self._resolve_outcome, unit, provider) for unit in chunk]
                    outcomes = [future.result() for future in futures]
            finally:
                # no unit stays RESOLVING if something other than a resolution error escapes
                for unit in chunk:
                    self.cache.mark_unresolved(self.cache_key(unit, provider))

            for outcome in outcomes:
                yield outcome

            completed += len(chunk)
            failed = sum(1 for outcome in outcomes if not outcome.ok)
            logger.info(f"Resolved {completed}/{total} units ({provider.value}, {failed} failed in last chunk)")
            if on_progress is not None:
                on_progress(completed, total)

            if delay and completed < total:
                self._sleep(delay)
