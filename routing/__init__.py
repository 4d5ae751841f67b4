#Marks routing as a package.
#Re-exports clean public APIs (distance math, provider clients) so other modules
#import from routing without knowing internal file names.
#No business logic.

from .models import LatLng, Location
from .distance import calculate_distance, estimate_base_duration
from .geocoding_client import GeocodingClient, GeocodingError
from .traffic_client import TrafficClient, TrafficError, TrafficSummary
from .weather_client import WeatherClient, WeatherError, RouteWeather

__all__ = [
           "LatLng",
           "Location",
           "calculate_distance",
           "estimate_base_duration",
           "GeocodingClient",
           "GeocodingError",
           "TrafficClient",
           "TrafficError",
           "TrafficSummary",
           "WeatherClient",
           "WeatherError",
           "RouteWeather",
             ]
