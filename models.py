# models.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from status import classify

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# STATE (in-memory records)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass
class PlantReading:
    id: int
    name: str
    image_url: str
    temperature: float = 0.0
    humidity: float = 0.0
    soil_moisture: float = 0.0
    soil_raw: int = 0
    status: str = "healthy"
    last_updated: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        moisture = classify(self.soil_moisture)
        return {
            "id": self.id,
            "name": self.name,
            "imageUrl": self.image_url,
            "temperature": self.temperature,
            "humidity": self.humidity,
            "soilMoisture": self.soil_moisture,
            "soilRaw": self.soil_raw,
            "status": self.status,
            "moisture": {"label": moisture.label, "class": moisture.severity, "short": moisture.short},
            "lastUpdated": self.last_updated.isoformat(),
        }


@dataclass
class AmbientReading:
    temperature: float = 0.0
    humidity: float = 0.0

    def to_dict(self) -> dict:
        return {"temperature": self.temperature, "humidity": self.humidity}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# WIRE (device API + service API bodies)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class DeviceReading(BaseModel):
    """One element of the device's GET /api/plants array"""

    model_config = ConfigDict(populate_by_name=True)

    temperature: float
    humidity: float
    soil_moisture: float = Field(alias="soilMoisture")
    soil_raw: int = Field(alias="soilRaw")
    # Reported by the firmware but never trusted; status is re-derived locally
    status: Optional[str] = None


class DeviceStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wifi_configured: bool = Field(alias="wifiConfigured")
    ssid: str = ""


class WifiCredentials(BaseModel):
    ssid: str = ""
    password: str = ""


class WifiResult(BaseModel):
    success: bool
    message: str = ""


class ImageUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl", min_length=1)
