#Purpose: The OSRM "adapter/client" behind the Free routing provider.
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#error handling
#parsing response JSON into the shared route shape
#It should not contain caching, batching or schedule rules.


from dotenv import load_dotenv
import logging
import os
from typing import List, Tuple, Dict, Any
import requests

from .errors import RouteProviderError

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()
OSRM_BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org")

logger = logging.getLogger(__name__)

# Internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal (lat, lon) → OSRM (lon,lat)
    - Return the normalized route shape shared with ORSClient:

        {
            "geometry": [(lat, lon), ...],
            "distance": float, # in meters
            "duration": float, # in seconds
            "legs": [
                {"distance": float, "duration": float,
                 "steps": [{"name": str, "distance": float, "duration": float}]},
            ],
        }
    """
    def __init__(self, base_url: str = None, profile: str = "driving", timeout: int = 10):
        self.base_url = (base_url or OSRM_BASE_URL or "").rstrip("/")
        self.timeout = timeout #the time to wait for a response from OSRM before giving up
        self.profile = profile #the mode of transportation (driving, walking, cycling)

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    #----------------
    # Internal helper methods for coordinate formatting and parsing
    #----------------
    def format_coordinates(self, coords: List[LatLon]) -> str:
        """Convert list of (lat, lon) to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join([f"{lon},{lat}" for lat, lon in coords])

    @staticmethod
    def _normalize_leg(leg: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "distance": float(leg.get("distance", 0.0)),
            "duration": float(leg.get("duration", 0.0)),
            "steps": [
                {
                    "name": step.get("name") or "",
                    "distance": float(step.get("distance", 0.0)),
                    "duration": float(step.get("duration", 0.0)),
                }
                for step in leg.get("steps", [])
            ],
        }

    #----------------
    # route service
    #----------------
    def compute_route(self, coordinates: List[LatLon], *, steps: bool = False) -> Dict[str, Any]:
        """
        calls the OSRM /route endpoint with the given coordinates (in visiting
        order) and returns the normalized route shape.

        steps=True asks OSRM for turn-by-turn steps so callers can break the
        route down by road name.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(coordinates)}"

        try:
            response = requests.get(
                url,
                params={
                    "overview": "full", # polyline geometry for the map
                    "geometries": "geojson",
                    "steps": "true" if steps else "false",
                },
                timeout=self.timeout,
            )
            data = response.json() #OSRM returns a JSON response with routes, each containing distance and duration
        except (requests.RequestException, ValueError) as e:
            raise RouteProviderError(f"OSRM request failed: {e}") from e

        #validating OSRM response
        if not isinstance(data, dict):
            raise RouteProviderError(f"OSRM returned an unexpected body: {type(data).__name__}")
        if data.get("code") != "Ok":
            raise RouteProviderError(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")

        routes = data.get("routes") or []
        if not routes:
            raise RouteProviderError("OSRM returned no route")

        try:
            route = routes[0] #take the first route (OSRM may return alternatives)
            coordinates_lon_lat = (route.get("geometry") or {}).get("coordinates", [])

            #Normalize output to internal format
            normalized = {
                "geometry": [(point[1], point[0]) for point in coordinates_lon_lat],
                "distance": float(route["distance"]),
                "duration": float(route["duration"]),
                "legs": [self._normalize_leg(leg) for leg in route.get("legs", [])],
            }
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            raise RouteProviderError(f"OSRM returned a malformed route: {e!r}") from e

        logger.debug(f"OSRM route: {len(coordinates)} waypoints, {normalized['distance']:.0f} m")
        return normalized
