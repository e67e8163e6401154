class PathResolutionError(Exception):
    """Base error for anything that stops a trip unit's path from resolving."""
    pass


class RouteProviderError(PathResolutionError):
    """Raised by a provider client on transport errors, non-OK codes or empty routes."""
    pass


class UnknownFacilityError(PathResolutionError):
    """Raised when a waypoint does not resolve to a known facility."""
    pass


class ProviderLockedError(PathResolutionError):
    """Raised when the Precision provider is used without being unlocked."""
    pass
