import asyncio
import logging

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.websockets import WebSocketState

from config import (
    DEVICE_TIMEOUT,
    DEVICE_URL,
    HOST,
    LOG_FORMAT,
    LOG_LEVEL,
    PORT,
    SEED_PLANTS,
    STALE_AFTER,
    SYNC_INTERVAL,
    WS_PUSH_INTERVAL,
)
from device import DeviceClient, DeviceError
from models import DeviceStatus, ImageUpdate, WifiCredentials
from store import StateStore
from sync import SyncLoop

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# LOGGING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

SETUP = "setup"
DASHBOARD = "dashboard"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FASTAPI
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

app = FastAPI(title="Plant Monitor", version="1.0")


async def check_wifi(device: DeviceClient) -> DeviceStatus:
    """Asks the device once whether it already joined a network"""
    try:
        status = await asyncio.to_thread(device.status)
    except DeviceError as e:
        logger.warning(f"✗ Could not read device status: {e}")
        return DeviceStatus(wifi_configured=False, ssid="Not Connected")
    if not status.wifi_configured:
        status.ssid = "Access Point"
    return status


def enter_dashboard():
    app.state.mode = DASHBOARD
    app.state.sync.start()


@app.on_event("startup")
async def startup_event():
    """Builds the store and sync loop, then picks the initial view"""
    logger.info("🚀 Starting server...")
    device = getattr(app.state, "device", None) or DeviceClient(DEVICE_URL, timeout=DEVICE_TIMEOUT)
    app.state.device = device
    app.state.store = StateStore(SEED_PLANTS, stale_after=STALE_AFTER)
    app.state.sync = SyncLoop(app.state.store, device, interval=SYNC_INTERVAL)
    app.state.mode = SETUP

    app.state.wifi = await check_wifi(device)
    if app.state.wifi.wifi_configured:
        logger.info(f"✓ Device on WiFi '{app.state.wifi.ssid}'")
        enter_dashboard()
    else:
        logger.info(f"Device not configured ({app.state.wifi.ssid}), showing setup")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑 Shutting down...")
    await app.state.sync.stop()
    app.state.device.close()
    app.state.device = None


def status_payload() -> dict:
    store = app.state.store
    sync = app.state.sync
    age = store.staleness()
    return {
        "mode": app.state.mode,
        "wifiConfigured": app.state.wifi.wifi_configured,
        "ssid": app.state.wifi.ssid,
        "syncing": sync.running,
        "lastSync": store.last_sync.isoformat() if store.last_sync else None,
        "secondsSinceSync": round(age, 1) if age is not None else None,
        "stale": store.is_stale(),
        "lastError": sync.last_error,
    }


@app.get("/")
async def get_dashboard():
    return HTMLResponse(DASHBOARD_HTML)


@app.get("/api/status")
async def get_status():
    """View mode, WiFi info and sync health"""
    return status_payload()


@app.get("/api/plants")
async def get_plants():
    return app.state.store.snapshot()


@app.get("/api/plants/{plant_id}")
async def get_plant(plant_id: int):
    plant = app.state.store.get(plant_id)
    if plant is None:
        raise HTTPException(status_code=404, detail=f"Plant {plant_id} not found")
    return plant.to_dict()


@app.post("/api/plants/{plant_id}/image")
async def replace_image(plant_id: int, payload: ImageUpdate):
    """Swaps the card photo (usually a data: URI read in the browser)"""
    if not app.state.store.replace_image(plant_id, payload.image_url):
        raise HTTPException(status_code=404, detail=f"Plant {plant_id} not found")
    logger.info(f"✓ Image updated for plant {plant_id}")
    return app.state.store.get(plant_id).to_dict()


@app.post("/api/wifi")
async def save_wifi(payload: WifiCredentials):
    """Forwards credentials to the device and switches to the dashboard on success"""
    if not payload.ssid or not payload.password:
        return JSONResponse(
            {"success": False, "message": "Please enter both SSID and password"},
            status_code=400,
        )

    try:
        result = await asyncio.to_thread(app.state.device.save_wifi, payload.ssid, payload.password)
    except DeviceError as e:
        logger.error(f"✗ savewifi failed: {e}")
        return JSONResponse(
            {"success": False, "message": "Connection error. Please try again."},
            status_code=502,
        )

    if not result.success:
        logger.warning(f"✗ Device rejected WiFi '{payload.ssid}': {result.message}")
        return {"success": False, "message": f"Failed to connect: {result.message}"}

    logger.info(f"✓ Device joined WiFi '{payload.ssid}'")
    app.state.wifi = DeviceStatus(wifi_configured=True, ssid=payload.ssid)
    enter_dashboard()
    return {"success": True, "message": "Connected to WiFi successfully!"}


@app.post("/api/wifi/reset")
async def reset_wifi():
    """Back to the setup form; polling carries on in the background"""
    app.state.mode = SETUP
    return status_payload()


@app.websocket("/ws/live")
async def websocket_endpoint(websocket: WebSocket):
    """Pushes the snapshot whenever the store or the sync health changed"""
    await websocket.accept()
    sent = None
    try:
        while True:
            store = app.state.store
            age = store.staleness()
            key = (
                store.version,
                app.state.mode,
                store.is_stale(),
                app.state.sync.last_error,
                int(age) if age is not None else None,
            )
            if key != sent:
                await websocket.send_json({"status": status_payload(), **store.snapshot()})
                sent = key
            try:
                # doubles as the push timer and the disconnect check
                await asyncio.wait_for(websocket.receive_text(), timeout=WS_PUSH_INTERVAL)
            except asyncio.TimeoutError:
                pass
    except WebSocketDisconnect:
        logger.debug("WebSocket client left")
    except Exception as e:
        logger.error(f"✗ WebSocket error: {e}")
        if websocket.client_state != WebSocketState.DISCONNECTED:
            await websocket.close()


def main():
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTML
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

DASHBOARD_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8" />
<meta name="viewport" content="width=device-width, initial-scale=1.0" />
<title>Plant Monitor</title>
<style>
:root {
  --success: #10b981;
  --warning: #f59e0b;
  --danger: #ef4444;
  --bg: #f3f4f6;
  --card: #ffffff;
  --text: #111827;
  --text-secondary: #6b7280;
}

body {
  margin: 0;
  background: var(--bg);
  font-family: Arial, sans-serif;
  color: var(--text);
}

header {
  display: flex;
  justify-content: space-between;
  align-items: center;
  padding: 16px 24px;
  background: var(--card);
  box-shadow: 0 1px 3px rgba(0,0,0,0.1);
}

.badge {
  color: #fff;
  padding: 6px 12px;
  border-radius: 999px;
  font-size: 0.85rem;
}

.page { display: none; padding: 24px; }
.page.active { display: block; }

.setup {
  max-width: 360px;
  margin: 40px auto;
  background: var(--card);
  border-radius: 14px;
  padding: 24px;
}

.setup input {
  width: 100%;
  box-sizing: border-box;
  padding: 10px;
  margin: 6px 0 14px;
  border: 1px solid #d1d5db;
  border-radius: 8px;
}

.btn {
  background: var(--success);
  color: #fff;
  border: none;
  border-radius: 8px;
  padding: 10px 16px;
  cursor: pointer;
  width: 100%;
}

.btn-outline {
  background: transparent;
  color: var(--success);
  border: 1px solid var(--success);
}

.tiles {
  display: grid;
  grid-template-columns: repeat(5, 1fr);
  gap: 12px;
  margin-bottom: 24px;
}

.tile {
  background: var(--card);
  border-radius: 14px;
  padding: 14px;
}

.tile .value { font-size: 1.6rem; font-weight: bold; }
.tile .label { color: var(--text-secondary); font-size: 0.85rem; }

.grid {
  display: grid;
  grid-template-columns: repeat(auto-fill, minmax(280px, 1fr));
  gap: 16px;
}

.plant-card {
  background: var(--card);
  border-radius: 14px;
  overflow: hidden;
  border-top: 4px solid var(--success);
}

.plant-card.warning { border-top-color: var(--warning); }
.plant-card.critical { border-top-color: var(--danger); }

.plant-image { position: relative; height: 180px; cursor: pointer; }
.plant-image img { width: 100%; height: 100%; object-fit: cover; }

.status-badge {
  position: absolute;
  top: 10px;
  right: 10px;
  text-transform: capitalize;
}

.status-healthy { background: var(--success); color: #fff; }
.status-warning { background: var(--warning); color: #fff; }
.status-critical { background: var(--danger); color: #fff; }

.plant-info { padding: 14px; display: flex; flex-direction: column; gap: 10px; }
.plant-info h3 { margin: 0; }
.timestamp { margin: 0; color: var(--text-secondary); font-size: 0.8rem; }

.metrics {
  display: grid;
  grid-template-columns: repeat(3, 1fr);
  text-align: center;
}

.metric .label { color: var(--text-secondary); font-size: 0.75rem; }
.metric .value { font-weight: bold; }

.moisture-status { padding: 2px 8px; border-radius: 6px; font-size: 0.75rem; }

.sync-bar { text-align: center; font-size: 0.85rem; color: var(--text-secondary); margin-bottom: 12px; }
.sync-bar.stale { color: var(--danger); }

.modal {
  display: none;
  position: fixed;
  inset: 0;
  background: rgba(0,0,0,0.5);
  align-items: center;
  justify-content: center;
}

.modal.active { display: flex; }
.modal-content { background: var(--card); border-radius: 14px; padding: 24px; width: 420px; }

.progress-bar { height: 8px; background: #e5e7eb; border-radius: 4px; overflow: hidden; }
.progress-fill { height: 100%; background: var(--success); }

.toast {
  position: fixed;
  bottom: 24px;
  left: 50%;
  transform: translateX(-50%);
  background: #111827;
  color: #fff;
  padding: 10px 18px;
  border-radius: 8px;
  opacity: 0;
  transition: opacity 0.3s;
}

.toast.show { opacity: 1; }
</style>
</head>
<body>
<header>
  <strong>🌱 Plant Monitor</strong>
  <span class="badge" id="wifiStatus" style="background: var(--warning)">Connecting...</span>
</header>

<!-- SETUP -->
<div class="page" id="setupPage">
  <form class="setup" id="wifiForm">
    <h2>Connect your device</h2>
    <label for="ssid">WiFi network</label>
    <input id="ssid" autocomplete="off">
    <label for="password">Password</label>
    <input id="password" type="password">
    <button class="btn" id="connectBtn" type="submit">Connect to WiFi</button>
  </form>
</div>

<!-- DASHBOARD -->
<div class="page" id="dashboardPage">
  <div class="sync-bar" id="syncBar">Waiting for first reading...</div>
  <div class="tiles">
    <div class="tile"><div class="value" id="totalPlants">0</div><div class="label">Plants</div></div>
    <div class="tile"><div class="value" id="healthyPlants">0</div><div class="label">Healthy</div></div>
    <div class="tile"><div class="value" id="warningPlants">0</div><div class="label">Need attention</div></div>
    <div class="tile"><div class="value" id="globalTemperature">--</div><div class="label">Temperature</div></div>
    <div class="tile"><div class="value" id="globalHumidity">--</div><div class="label">Humidity</div></div>
  </div>
  <div class="grid" id="plantsGrid"></div>
  <p style="text-align: center"><a href="#" id="resetWifi">Change WiFi</a></p>
</div>

<div class="modal" id="detailModal"><div class="modal-content" id="detailContent"></div></div>
<div class="toast" id="toast"></div>

<script>
let state = { plants: [], ambient: { temperature: 0, humidity: 0 }, stats: {} };

function showToast(message) {
  const toast = document.getElementById("toast");
  toast.textContent = message;
  toast.classList.add("show");
  setTimeout(() => toast.classList.remove("show"), 3000);
}

function showPage(mode) {
  document.getElementById("setupPage").classList.toggle("active", mode === "setup");
  document.getElementById("dashboardPage").classList.toggle("active", mode === "dashboard");
}

function updateWifiStatus(status) {
  const el = document.getElementById("wifiStatus");
  if (status.wifiConfigured) {
    el.textContent = "Connected to " + status.ssid;
    el.style.background = "var(--success)";
  } else {
    el.textContent = status.ssid;
    el.style.background = "var(--warning)";
  }
}

function updateSyncBar(status) {
  const bar = document.getElementById("syncBar");
  bar.classList.toggle("stale", status.stale);
  if (status.secondsSinceSync === null) {
    bar.textContent = status.lastError ? "✗ Device unreachable: " + status.lastError : "Waiting for first reading...";
  } else if (status.stale) {
    bar.textContent = "✗ No fresh data for " + Math.round(status.secondsSinceSync) + "s";
  } else {
    bar.textContent = "● Live";
  }
}

function plantCard(plant) {
  const card = document.createElement("div");
  card.className = "plant-card " + plant.status;
  card.innerHTML = `
    <div class="plant-image" onclick="uploadImage(${plant.id})">
      <img src="${plant.imageUrl}" alt="${plant.name}">
      <span class="badge status-badge status-${plant.status}">${plant.status}</span>
    </div>
    <div class="plant-info">
      <div>
        <h3>${plant.name}</h3>
        <p class="timestamp">Updated ${new Date(plant.lastUpdated).toLocaleTimeString()}</p>
      </div>
      <div class="metrics">
        <div class="metric"><div class="label">Temp</div><div class="value">${plant.temperature.toFixed(1)}°C</div></div>
        <div class="metric"><div class="label">Humidity</div><div class="value">${plant.humidity.toFixed(1)}%</div></div>
        <div class="metric"><div class="label">Moisture</div><div class="value">${plant.soilMoisture.toFixed(1)}%</div></div>
      </div>
      <div style="font-size: 12px; color: var(--text-secondary); text-align: center;">
        Raw: ${plant.soilRaw} | Status:
        <span class="moisture-status status-${plant.moisture.class}">${plant.moisture.label}</span>
      </div>
      <button class="btn btn-outline" onclick="showDetail(${plant.id})">View Details</button>
    </div>`;
  return card;
}

function render() {
  document.getElementById("totalPlants").textContent = state.stats.total;
  document.getElementById("healthyPlants").textContent = state.stats.healthy;
  document.getElementById("warningPlants").textContent = state.stats.attention;
  document.getElementById("globalTemperature").textContent = state.ambient.temperature.toFixed(1) + "°C";
  document.getElementById("globalHumidity").textContent = state.ambient.humidity.toFixed(1) + "%";

  const grid = document.getElementById("plantsGrid");
  grid.innerHTML = "";
  state.plants.forEach(p => grid.appendChild(plantCard(p)));
}

function showDetail(plantId) {
  const plant = state.plants.find(p => p.id === plantId);
  if (!plant) return;
  document.getElementById("detailContent").innerHTML = `
    <h2>🌱 ${plant.name} <span class="badge status-${plant.status}">${plant.status}</span></h2>
    <p>Temperature: <strong>${plant.temperature.toFixed(1)}°C</strong> (shared DHT sensor)</p>
    <p>Air humidity: <strong>${plant.humidity.toFixed(1)}%</strong> (shared DHT sensor)</p>
    <div class="progress-bar"><div class="progress-fill" style="width: ${plant.humidity}%"></div></div>
    <p>Soil moisture: <strong>${plant.soilMoisture.toFixed(1)}%</strong>
      <span class="moisture-status status-${plant.moisture.class}">${plant.moisture.label}</span></p>
    <p style="color: var(--text-secondary)">Raw value: ${plant.soilRaw}</p>
    <div class="progress-bar"><div class="progress-fill" style="width: ${plant.soilMoisture}%"></div></div>
    <p>Last updated: ${new Date(plant.lastUpdated).toLocaleString()}</p>`;
  document.getElementById("detailModal").classList.add("active");
}

function uploadImage(plantId) {
  const input = document.createElement("input");
  input.type = "file";
  input.accept = "image/*";
  input.capture = "environment";
  input.onchange = (e) => {
    const file = e.target.files[0];
    if (!file) return;
    const reader = new FileReader();
    reader.onloadend = async () => {
      const response = await fetch(`/api/plants/${plantId}/image`, {
        method: "POST",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify({ imageUrl: reader.result })
      });
      showToast(response.ok ? "Image updated successfully!" : "Could not update image");
    };
    reader.readAsDataURL(file);
  };
  input.click();
}

document.getElementById("detailModal").addEventListener("click", (e) => {
  if (e.target.id === "detailModal") e.target.classList.remove("active");
});

document.getElementById("wifiForm").addEventListener("submit", async (e) => {
  e.preventDefault();
  const ssid = document.getElementById("ssid").value;
  const password = document.getElementById("password").value;
  if (!ssid || !password) {
    showToast("Please enter both SSID and password");
    return;
  }
  const btn = document.getElementById("connectBtn");
  btn.textContent = "Connecting...";
  btn.disabled = true;
  try {
    const response = await fetch("/api/wifi", {
      method: "POST",
      headers: { "Content-Type": "application/json" },
      body: JSON.stringify({ ssid, password })
    });
    const data = await response.json();
    showToast(data.message);
  } catch (error) {
    showToast("Connection error. Please try again.");
  }
  btn.textContent = "Connect to WiFi";
  btn.disabled = false;
});

document.getElementById("resetWifi").addEventListener("click", (e) => {
  e.preventDefault();
  fetch("/api/wifi/reset", { method: "POST" });
});

// ━━ WEBSOCKET

const ws = new WebSocket((location.protocol === "https:" ? "wss://" : "ws://") + location.host + "/ws/live");

ws.onmessage = (event) => {
  state = JSON.parse(event.data);
  showPage(state.status.mode);
  updateWifiStatus(state.status);
  updateSyncBar(state.status);
  render();
};

ws.onclose = () => {
  document.getElementById("wifiStatus").textContent = "Reconnecting...";
  setTimeout(() => location.reload(), 5000);
};
</script>
</body>
</html>"""


if __name__ == "__main__":
    main()
