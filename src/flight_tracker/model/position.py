from dataclasses import dataclass
import math


EARTH_RADIUS_M = 6371e3


@dataclass(frozen=True)
class Position:
    """
    A location on the surface of Earth, in decimal degrees. Technically no datum is specified by this class, but ADS-B
    position data is referenced to WGS 84, and that is maintained throughout this entire system.
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")

    def distance_to(self, other: "Position") -> float:
        """
        Great-circle distance to `other` in metres, using the haversine formula on a spherical Earth.
        """
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        delta_lat = math.radians(other.latitude - self.latitude)
        delta_lon = math.radians(other.longitude - self.longitude)

        a = math.sin(delta_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
        return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    def bearing_to(self, other: "Position") -> float:
        """
        Initial bearing from this position to `other`, in degrees clockwise from true north, in the range [0, 360).
        """
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        delta_lon = math.radians(other.longitude - self.longitude)

        y = math.sin(delta_lon) * math.cos(lat2)
        x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(delta_lon)
        return (math.degrees(math.atan2(y, x)) + 360) % 360
