# sync.py
import asyncio
import itertools
import logging
from typing import Optional, Set

from device import DeviceClient, DeviceError
from store import StateStore

logger = logging.getLogger(__name__)


class SyncLoop:
    """
    Polls the device for plant readings on a fixed-rate timer and merges them
    into the store.

    Ticks may overlap when the device is slow. Every tick takes a sequence
    number and a response is dropped if a later tick has already been applied,
    so the store never goes back to older data.
    """

    def __init__(self, store: StateStore, device: DeviceClient, interval: float = 5.0):
        self.store = store
        self.device = device
        self.interval = interval
        self.last_error: Optional[str] = None
        self._seq = itertools.count(1)
        self._applied = 0
        self._timer: Optional[asyncio.Task] = None
        self._ticks: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> int:
        return len(self._ticks)

    def start(self):
        if self.running:
            return
        logger.info(f"🔄 Sync loop started (every {self.interval}s)")
        self._timer = asyncio.create_task(self._run())

    async def stop(self):
        tasks = list(self._ticks)
        if self._timer is not None:
            tasks.append(self._timer)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timer = None
        self._ticks.clear()
        logger.info("🛑 Sync loop stopped")

    async def _run(self):
        # first tick fires immediately, the rest on the interval
        while True:
            task = asyncio.create_task(self.tick())
            self._ticks.add(task)
            task.add_done_callback(self._ticks.discard)
            await asyncio.sleep(self.interval)

    async def tick(self) -> bool:
        """One fetch-and-merge cycle. Returns True when the store was updated."""
        seq = next(self._seq)
        try:
            readings = await asyncio.to_thread(self.device.plants)
        except DeviceError as e:
            self.last_error = str(e)
            logger.warning(f"✗ Sync #{seq} skipped: {e}")
            return False
        except Exception as e:
            self.last_error = str(e)
            logger.exception(f"✗ Unexpected error in sync #{seq}: {e}")
            return False

        if seq < self._applied:
            logger.debug(f"Discarding sync #{seq}: #{self._applied} already applied")
            return False

        for index, reading in enumerate(readings):
            self.store.merge_at(index, reading)
        # the DHT sensor is shared, every element carries the same ambient values
        if readings:
            self.store.set_ambient(readings[0].temperature, readings[0].humidity)
        self.store.mark_synced()

        self._applied = seq
        self.last_error = None
        logger.debug(f"✓ Sync #{seq} merged {len(readings)} readings")
        return True
