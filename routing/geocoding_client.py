#Purpose: The geocoding "adapter/client".
#Sole responsibility: talk to the Mapbox geocoding API via HTTP and return normalized Locations.
#Encapsulates Mapbox-specific details:
#URL construction (/geocoding/v5/mapbox.places/<query>.json)
#feature context parsing (place / region / country / postcode)
#center ordering ([lng, lat] -> Location.lat / Location.lng)
#It should not contain quoting or ETA rules.

from dotenv import load_dotenv
import logging
import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from routing.models import Location

# Example in .env:
# MAPBOX_TOKEN=pk.xxxxx
load_dotenv()
MAPBOX_TOKEN = os.getenv("MAPBOX_TOKEN")
MAPBOX_BASE_URL = os.getenv("MAPBOX_BASE_URL", "https://api.mapbox.com")

MIN_QUERY_LENGTH = 2
PLACE_TYPES = "address,place,locality,neighborhood"

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Custom exception for geocoding client errors."""
    pass


def parse_feature(feature: Dict[str, Any]) -> Location:
    """
    Convert one Mapbox feature into a Location.

    city falls back to the feature text when no "place" context exists.
    address is "<house number> <street>" when a number is present,
    otherwise the first part of place_name.
    """
    city = ""
    state = ""
    country = ""
    zip_code = ""

    for ctx in feature.get("context") or []:
        ctx_id = ctx.get("id", "")
        if ctx_id.startswith("place"):
            city = ctx.get("text", "")
        elif ctx_id.startswith("region"):
            short_code = ctx.get("short_code")
            # "US-CA" -> "CA"
            state = re.sub(r"^[A-Z]{2}-", "", short_code) if short_code else ctx.get("text", "")
        elif ctx_id.startswith("country"):
            country = ctx.get("text", "")
        elif ctx_id.startswith("postcode"):
            zip_code = ctx.get("text", "")

    text = feature.get("text", "")
    if not city and text:
        city = text

    house_number = feature.get("address") or ""
    if house_number:
        address = f"{house_number} {text}"
    else:
        address = feature.get("place_name", "").split(",")[0]

    lng, lat = feature["center"][0], feature["center"][1]

    return Location(
        id=feature.get("id", ""),
        address=address,
        city=city,
        state=state,
        country=country,
        zip=zip_code,
        lat=lat,
        lng=lng,
    )


class GeocodingClient:
    """
    Geocoding Adapter / Client

    Sole responsibility:
    - Talk to Mapbox via HTTP
    - Return normalized Location objects
    """
    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None, timeout: int = 5):
        self.token = token or MAPBOX_TOKEN
        self.base_url = (base_url or MAPBOX_BASE_URL).rstrip("/")
        self.timeout = timeout

        if not self.token:
            raise ValueError("Mapbox token not set. Please set MAPBOX_TOKEN in the .env file.")

    def search(self, query: str, limit: int = 5) -> List[Location]:
        """
        Free-text address search.

        Returns:
            up to `limit` Locations, best match first. Queries shorter than
            two characters return [] without calling the API.
        """
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        url = f"{self.base_url}/geocoding/v5/mapbox.places/{quote(query, safe='')}.json"
        logger.info("Geocoding query: %r", query)

        try:
            response = requests.get(
                url,
                params={
                    "access_token": self.token,
                    "limit": limit,
                    "types": PLACE_TYPES,
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Mapbox request failed: {e}")
            raise GeocodingError(f"Mapbox request failed: {e}") from e

        if not response.ok:
            logger.error(f"Mapbox API error: {response.status_code} - {response.text}")
            raise GeocodingError(f"Mapbox API error: {response.status_code}")

        features = response.json().get("features", [])
        logger.info("Found %d results", len(features))

        return [parse_feature(feature) for feature in features]

    def first(self, query: str) -> Optional[Location]:
        results = self.search(query, limit=1)
        return results[0] if results else None
