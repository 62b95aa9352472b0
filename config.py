# config.py
import os

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# DEVICE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

# ESP32 answers on its AP address until it joins a network
DEVICE_URL = os.getenv("DEVICE_URL", "http://192.168.4.1").rstrip("/")
DEVICE_TIMEOUT = float(os.getenv("DEVICE_TIMEOUT", "5"))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SYNC
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SYNC_INTERVAL = float(os.getenv("SYNC_INTERVAL", "5"))
STALE_AFTER = float(os.getenv("STALE_AFTER", str(SYNC_INTERVAL * 3)))
WS_PUSH_INTERVAL = float(os.getenv("WS_PUSH_INTERVAL", "1"))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SERVER / LOGGING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PLANTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def placeholder_image(label: str, color: str) -> str:
    """Inline SVG card shown until the user uploads a photo"""
    return (
        'data:image/svg+xml,<svg xmlns="http://www.w3.org/2000/svg" width="300" height="200">'
        f'<rect fill="%23{color}" width="300" height="200"/>'
        '<text x="50%" y="50%" fill="white" font-size="20" text-anchor="middle" dy=".3em">'
        f'{label}</text></svg>'
    )


# Order matters: the device reports plants as an array, position i -> SEED_PLANTS[i]
SEED_PLANTS = [
    {"id": 1, "name": "Monstera Deliciosa", "image_url": placeholder_image("Plant 1", "10b981")},
    {"id": 2, "name": "Snake Plant", "image_url": placeholder_image("Plant 2", "059669")},
    {"id": 3, "name": "Peace Lily", "image_url": placeholder_image("Plant 3", "22c55e")},
]
