#Purpose: The live traffic "adapter/client" (TomTom).
#Sole responsibility: sample traffic flow + incidents along a lane and summarize them
#into a single 0-100 congestion score for display.
#Encapsulates TomTom-specific details:
#flowSegmentData sampling at origin / midpoint / destination
#incidentDetails lookup in a padded bounding box
#It should not contain ETA rules: the ETA core keeps its own time-of-day model.

from dotenv import load_dotenv
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests

from routing.models import LatLng

# Example in .env:
# TOMTOM_API_KEY=xxxxx
load_dotenv()
TOMTOM_API_KEY = os.getenv("TOMTOM_API_KEY")
TOMTOM_BASE_URL = os.getenv("TOMTOM_BASE_URL", "https://api.tomtom.com")

BBOX_PADDING_DEGREES = 0.5
INCIDENT_FIELDS = (
    "{incidents{type,geometry{type,coordinates},properties{iconCategory,magnitudeOfDelay,"
    "events{description,code},startTime,endTime,from,to,length,delay,roadNumbers}}}"
)
INCIDENT_CATEGORIES = "0,1,2,3,4,5,6,7,8,9,10,11,14"

logger = logging.getLogger(__name__)


class TrafficError(Exception):
    """Custom exception for traffic client errors."""
    pass


@dataclass(frozen=True)
class TrafficSummary:
    """
    Route-level traffic snapshot.
    traffic_score: 0 = free flow, 100 = severe congestion.
    """
    traffic_score: int
    status: str  # green | yellow | red
    label: str
    avg_congestion_percent: int
    incident_count: int
    severe_incident_count: int
    has_road_closure: bool
    flow_data_points: int


def _is_severe(incident: Dict[str, Any]) -> bool:
    props = incident.get("properties") or {}
    magnitude = props.get("magnitudeOfDelay")
    category = props.get("iconCategory")
    return (magnitude is not None and magnitude >= 3) or (category is not None and category <= 2)


def _is_moderate(incident: Dict[str, Any]) -> bool:
    props = incident.get("properties") or {}
    magnitude = props.get("magnitudeOfDelay")
    category = props.get("iconCategory")
    return magnitude == 2 or (category is not None and 2 < category <= 5)


def score_traffic(
    flow_segments: Sequence[Optional[Dict[str, Any]]],
    incidents: Sequence[Dict[str, Any]],
) -> TrafficSummary:
    """
    Pure scoring of already-fetched TomTom payloads.

    flow_segments: flowSegmentData dicts (None for points that failed)
    incidents: incident dicts from incidentDetails

    score = avg_congestion * 60 + 15 per severe incident + 5 per moderate incident
            + 30 if any road closure, clamped to [0, 100]
    """
    total_congestion = 0.0
    valid_points = 0
    has_road_closure = False

    for segment in flow_segments:
        if not segment:
            continue
        free_flow = segment.get("freeFlowSpeed", 0) or 0
        current = segment.get("currentSpeed", 0) or 0
        ratio = (free_flow - current) / free_flow if free_flow > 0 else 0.0
        total_congestion += max(0.0, ratio)
        valid_points += 1
        if segment.get("roadClosure"):
            has_road_closure = True

    avg_congestion = total_congestion / valid_points if valid_points else 0.0

    severe = [i for i in incidents if _is_severe(i)]
    moderate = [i for i in incidents if _is_moderate(i)]

    score = avg_congestion * 60
    score += len(severe) * 15
    score += len(moderate) * 5
    if has_road_closure:
        score += 30
    score = min(100.0, max(0.0, score))

    if score <= 20:
        status, label = "green", "Free-flowing traffic"
    elif score <= 50:
        status, label = "yellow", "Moderate congestion"
    else:
        status, label = "red", "Heavy traffic / incidents"

    return TrafficSummary(
        traffic_score=int(round(score)),
        status=status,
        label=label,
        avg_congestion_percent=int(round(avg_congestion * 100)),
        incident_count=len(incidents),
        severe_incident_count=len(severe),
        has_road_closure=has_road_closure,
        flow_data_points=valid_points,
    )


class TrafficClient:
    """
    Traffic Adapter / Client

    Sole responsibility:
    - Talk to TomTom via HTTP
    - Return a normalized TrafficSummary
    """
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, timeout: int = 5):
        self.api_key = api_key or TOMTOM_API_KEY
        self.base_url = (base_url or TOMTOM_BASE_URL).rstrip("/")
        self.timeout = timeout

        if not self.api_key:
            raise ValueError("TOMTOM_API_KEY not set. Please set it in the .env file.")

    def fetch_flow(self, point: LatLng) -> Optional[Dict[str, Any]]:
        """
        flowSegmentData at one point. Failures are logged and return None so
        the remaining sample points still count.
        """
        lat, lng = point
        url = f"{self.base_url}/traffic/services/4/flowSegmentData/absolute/10/json"
        try:
            response = requests.get(
                url,
                params={"point": f"{lat},{lng}", "key": self.api_key},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Flow fetch error at {lat},{lng}: {e}")
            return None

        if not response.ok:
            logger.warning(f"Flow API error at {lat},{lng}: {response.status_code}")
            return None

        try:
            return response.json().get("flowSegmentData")
        except ValueError as e:
            logger.warning(f"Flow API returned invalid JSON at {lat},{lng}: {e}")
            return None

    def fetch_incidents(self, origin: LatLng, destination: LatLng) -> List[Dict[str, Any]]:
        min_lat = min(origin[0], destination[0]) - BBOX_PADDING_DEGREES
        max_lat = max(origin[0], destination[0]) + BBOX_PADDING_DEGREES
        min_lng = min(origin[1], destination[1]) - BBOX_PADDING_DEGREES
        max_lng = max(origin[1], destination[1]) + BBOX_PADDING_DEGREES

        try:
            response = requests.get(
                f"{self.base_url}/traffic/services/5/incidentDetails",
                params={
                    "key": self.api_key,
                    "bbox": f"{min_lng},{min_lat},{max_lng},{max_lat}",
                    "fields": INCIDENT_FIELDS,
                    "language": "en-US",
                    "categoryFilter": INCIDENT_CATEGORIES,
                    "timeValidityFilter": "present",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Incidents fetch error: {e}")
            return []

        if not response.ok:
            logger.warning(f"Incidents API error: {response.status_code}")
            return []

        try:
            return response.json().get("incidents") or []
        except ValueError as e:
            logger.warning(f"Incidents API returned invalid JSON: {e}")
            return []

    def route_traffic(self, origin: LatLng, destination: LatLng) -> TrafficSummary:
        """
        Sample flow at origin, midpoint and destination plus incidents in the
        route bounding box.

        Raises:
            TrafficError: when no flow point and no incident feed answered.
        """
        midpoint = ((origin[0] + destination[0]) / 2, (origin[1] + destination[1]) / 2)
        logger.info(f"Fetching traffic data for route: {origin} -> {destination}")

        flows = [self.fetch_flow(point) for point in (origin, midpoint, destination)]
        incidents = self.fetch_incidents(origin, destination)

        if not any(flows) and not incidents:
            raise TrafficError("No traffic data available for route")

        summary = score_traffic(flows, incidents)
        logger.info(f"Traffic result: score={summary.traffic_score} status={summary.status}")
        return summary
