# store.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from models import AmbientReading, DeviceReading, PlantReading
from status import classify

logger = logging.getLogger(__name__)


class StateStore:
    """
    Current known reading for every monitored plant plus the shared ambient
    reading. Built once at startup and handed to the sync loop and the web
    layer; all mutation goes through the methods below.
    """

    def __init__(self, seeds: Iterable[dict], stale_after: float = 15.0):
        self.plants: List[PlantReading] = [PlantReading(**seed) for seed in seeds]
        self.ambient = AmbientReading()
        self.stale_after = stale_after
        self.last_sync: Optional[datetime] = None
        self.version = 0

    def __len__(self):
        return len(self.plants)

    def get(self, plant_id: int) -> Optional[PlantReading]:
        for plant in self.plants:
            if plant.id == plant_id:
                return plant
        return None

    def merge_at(self, index: int, reading: DeviceReading, now: Optional[datetime] = None) -> bool:
        """
        Overwrites the sensor fields of the plant at `index` and re-derives its
        status. The device correlates by array position, so an index with no
        local plant is ignored.
        """
        if not 0 <= index < len(self.plants):
            logger.debug(f"Ignoring reading for position {index}: only {len(self.plants)} plants")
            return False

        plant = self.plants[index]
        plant.temperature = reading.temperature
        plant.humidity = reading.humidity
        plant.soil_moisture = reading.soil_moisture
        plant.soil_raw = reading.soil_raw
        plant.status = classify(reading.soil_moisture).severity
        stamp = now or datetime.now()
        # last_updated never moves backwards
        if stamp > plant.last_updated:
            plant.last_updated = stamp
        self.version += 1

        logger.debug(f"📊 {plant.name}: {plant.soil_moisture}% ({plant.status})")
        return True

    def set_ambient(self, temperature: float, humidity: float):
        self.ambient = AmbientReading(temperature=temperature, humidity=humidity)
        self.version += 1

    def replace_image(self, plant_id: int, image_url: str) -> bool:
        plant = self.get(plant_id)
        if plant is None:
            return False
        plant.image_url = image_url
        self.version += 1
        return True

    # ━━ sync health

    def mark_synced(self, now: Optional[datetime] = None):
        self.last_sync = now or datetime.now()

    def staleness(self, now: Optional[datetime] = None) -> Optional[float]:
        """Seconds since the last successful sync, None before the first one"""
        if self.last_sync is None:
            return None
        return ((now or datetime.now()) - self.last_sync).total_seconds()

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        age = self.staleness(now)
        return age is None or age > self.stale_after

    # ━━ views

    def stats(self) -> dict:
        healthy = sum(1 for p in self.plants if p.status == "healthy")
        attention = sum(1 for p in self.plants if p.status in ("warning", "critical"))
        return {"total": len(self.plants), "healthy": healthy, "attention": attention}

    def snapshot(self) -> dict:
        age = self.staleness()
        return {
            "version": self.version,
            "plants": [p.to_dict() for p in self.plants],
            "ambient": self.ambient.to_dict(),
            "stats": self.stats(),
            "lastSync": self.last_sync.isoformat() if self.last_sync else None,
            "secondsSinceSync": round(age, 1) if age is not None else None,
            "stale": self.is_stale(),
        }
