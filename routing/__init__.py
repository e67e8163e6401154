#Marks routing as a package.
#Re-exports the public API (clients, resolver, cache, models) so other modules
#import from routing without knowing internal file names.
#No business logic apart from the default provider wiring below.

from .osrm_client import OSRMClient
from .ors_client import ORSClient
from .access import unlock_precision
from .cache import CacheEntry, PathCache
from .errors import PathResolutionError, ProviderLockedError, RouteProviderError, UnknownFacilityError
from .models import BatchOutcome, PathLeg, ResolutionState, ResolvedPath, RoadSegment, RoutingProvider
from .policy import ResolverPolicy, default_resolver_policy
from .resolver import CancellationToken, RoutePathResolver


def default_providers(*, with_precision: bool = False) -> dict:
    """
    Free (OSRM) client always; Precision (ORS) client only when asked for,
    since it needs ORS_API_KEY.
    """
    providers = {RoutingProvider.FREE: OSRMClient()}
    if with_precision:
        providers[RoutingProvider.PRECISION] = ORSClient()
    return providers


__all__ = [
    "OSRMClient",
    "ORSClient",
    "unlock_precision",
    "CacheEntry",
    "PathCache",
    "PathResolutionError",
    "ProviderLockedError",
    "RouteProviderError",
    "UnknownFacilityError",
    "BatchOutcome",
    "PathLeg",
    "ResolutionState",
    "ResolvedPath",
    "RoadSegment",
    "RoutingProvider",
    "ResolverPolicy",
    "default_resolver_policy",
    "CancellationToken",
    "RoutePathResolver",
    "default_providers",
]
