#Purpose: The OpenRouteService adapter behind the Precision routing provider.
#Same contract as OSRMClient.compute_route so the resolver can swap them:
#(lat, lon) in, normalized route dict out.
#ORS differences handled here:
#POST with a JSON body instead of coordinates in the URL
#API key in the Authorization header
#GeoJSON FeatureCollection response, per-hop data under "segments"


from dotenv import load_dotenv
import logging
import os
from typing import List, Tuple, Dict, Any
import requests

from .errors import RouteProviderError

# Example in .env:
# ORS_BASE_URL=https://api.openrouteservice.org
# ORS_API_KEY=<your key>
load_dotenv()
ORS_BASE_URL = os.getenv("ORS_BASE_URL", "https://api.openrouteservice.org")
ORS_API_KEY = os.getenv("ORS_API_KEY")

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]


class ORSClient:
    """
    OpenRouteService Adapter / Client (heavy-goods-vehicle profile by default).
    """
    def __init__(self, api_key: str = None, base_url: str = None,
                 profile: str = "driving-hgv", timeout: int = 15):
        self.api_key = api_key or ORS_API_KEY
        self.base_url = (base_url or ORS_BASE_URL or "").rstrip("/")
        self.profile = profile
        self.timeout = timeout

        if not self.api_key:
            raise ValueError("ORS API key not set. Please set ORS_API_KEY in the .env file.")

    def format_coordinates(self, coords: List[LatLon]) -> List[List[float]]:
        """Convert list of (lat, lon) to ORS body format [[lon, lat], ...]"""
        return [[lon, lat] for lat, lon in coords]

    def compute_route(self, coordinates: List[LatLon], *, steps: bool = False) -> Dict[str, Any]:
        """
        calls ORS /v2/directions/{profile}/geojson and returns the normalized
        route shape (see OSRMClient.compute_route).
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        url = f"{self.base_url}/v2/directions/{self.profile}/geojson"

        try:
            response = requests.post(
                url,
                json={
                    "coordinates": self.format_coordinates(coordinates),
                    "instructions": steps,
                },
                headers={
                    "Authorization": self.api_key,
                    "Accept": "application/geo+json, application/json",
                },
                timeout=self.timeout,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise RouteProviderError(f"ORS request failed: {e}") from e

        if not isinstance(data, dict):
            raise RouteProviderError(f"ORS returned an unexpected body ({response.status_code}): {type(data).__name__}")
        if response.status_code != 200 or "error" in data:
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else error
            raise RouteProviderError(f"ORS error ({response.status_code}): {message or 'Unknown error'}")

        features = data.get("features") or []
        if not features:
            raise RouteProviderError("ORS returned no route")

        try:
            feature = features[0]
            properties = feature.get("properties", {})
            # ORS omits zero-valued summary fields
            summary = properties.get("summary", {})
            coordinates_lon_lat = (feature.get("geometry") or {}).get("coordinates", [])

            legs = [
                {
                    "distance": float(segment.get("distance", 0.0)),
                    "duration": float(segment.get("duration", 0.0)),
                    "steps": [
                        {
                            "name": step.get("name") or "",
                            "distance": float(step.get("distance", 0.0)),
                            "duration": float(step.get("duration", 0.0)),
                        }
                        for step in segment.get("steps", [])
                    ],
                }
                for segment in properties.get("segments", [])
            ]

            normalized = {
                # ORS geometry may carry elevation as a third value
                "geometry": [(point[1], point[0]) for point in coordinates_lon_lat],
                "distance": float(summary.get("distance", 0.0)),
                "duration": float(summary.get("duration", 0.0)),
                "legs": legs,
            }
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            raise RouteProviderError(f"ORS returned a malformed route: {e!r}") from e

        logger.debug(f"ORS route: {len(coordinates)} waypoints, {len(legs)} segments")
        return normalized
