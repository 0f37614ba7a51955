"""Point-in-time environment data: location, activity, health and device state."""

import math
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

EARTH_RADIUS_M = 6_371_000.0


def _now() -> datetime:
    return datetime.now(UTC)


class LocationSnapshot(BaseModel):
    """A GPS fix with an optional resolved place name."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    horizontal_accuracy: float
    altitude: float | None = None
    vertical_accuracy: float | None = None
    place_name: str | None = None
    address: str | None = None
    timestamp: datetime = Field(default_factory=_now)

    def distance_to(self, other: "LocationSnapshot") -> float:
        """Great-circle distance to another fix, in metres."""
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        d_lat = math.radians(other.latitude - self.latitude)
        d_lon = math.radians(other.longitude - self.longitude)

        a = (
            math.sin(d_lat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
        )
        return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class ActivityType(StrEnum):
    STATIONARY = "stationary"
    WALKING = "walking"
    RUNNING = "running"
    CYCLING = "cycling"
    AUTOMOTIVE = "automotive"
    UNKNOWN = "unknown"


class HealthMetrics(BaseModel):
    """Fitness readings. Every field is independently optional."""

    model_config = ConfigDict(frozen=True)

    heart_rate: float | None = None
    steps: int | None = None
    distance: float | None = None  # metres
    active_energy: float | None = None  # kcal
    stand_hours: int | None = None

    @property
    def has_data(self) -> bool:
        return any(
            value is not None
            for value in (
                self.heart_rate,
                self.steps,
                self.distance,
                self.active_energy,
                self.stand_hours,
            )
        )


class ThermalState(StrEnum):
    NOMINAL = "nominal"
    FAIR = "fair"
    SERIOUS = "serious"
    CRITICAL = "critical"


class NetworkType(StrEnum):
    NONE = "none"
    WIFI = "wifi"
    CELLULAR = "cellular"
    ETHERNET = "ethernet"
    UNKNOWN = "unknown"


class DeviceState(BaseModel):
    """Battery, power and connectivity state."""

    model_config = ConfigDict(frozen=True)

    battery_level: float | None = Field(default=None, ge=0.0, le=1.0)
    charging: bool | None = None
    low_power_mode: bool | None = None
    thermal_state: ThermalState | None = None
    network_type: NetworkType | None = None

    @property
    def has_data(self) -> bool:
        return any(
            value is not None
            for value in (
                self.battery_level,
                self.charging,
                self.low_power_mode,
                self.thermal_state,
                self.network_type,
            )
        )

    @property
    def is_optimal_for_compute(self) -> bool:
        """Whether the device can take on heavy background work right now."""
        good_battery = (self.battery_level or 0.0) > 0.2 or bool(self.charging)
        cool = self.thermal_state in (None, ThermalState.NOMINAL, ThermalState.FAIR)
        return good_battery and cool and not self.low_power_mode


class EnvironmentSnapshot(BaseModel):
    """Everything known about the device's surroundings at one moment."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_now)
    location: LocationSnapshot | None = None
    activity: ActivityType | None = None
    health: HealthMetrics | None = None
    device: DeviceState | None = None

    @property
    def has_data(self) -> bool:
        """True if at least one optional reading is present."""
        return (
            self.location is not None
            or self.activity is not None
            or (self.health is not None and self.health.has_data)
            or (self.device is not None and self.device.has_data)
        )

    @property
    def summary(self) -> str:
        """One-line human-readable summary."""
        parts: list[str] = []
        if self.location is not None:
            parts.append(f"Location: {self.location.place_name or 'available'}")
        if self.activity is not None:
            parts.append(f"Activity: {self.activity.value}")
        if self.health is not None:
            if self.health.heart_rate is not None:
                parts.append(f"{int(self.health.heart_rate)} bpm")
            if self.health.steps is not None:
                parts.append(f"{self.health.steps} steps")
        if self.device is not None and self.device.battery_level is not None:
            parts.append(f"Battery {int(self.device.battery_level * 100)}%")
        return " | ".join(parts) if parts else "No sensor data"
