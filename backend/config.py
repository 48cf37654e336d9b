"""IP Weather Backend — Configuration & Constants"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (one level up from backend/)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path)

VERSION = "1.0.0"

# ── Server ──
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "3000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [o.strip() for o in os.environ.get("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

# ── Upstream APIs ──
GEOIP_API_URL = os.environ.get("GEOIP_API_URL", "http://ip-api.com/json/{ip}")
WEATHER_API_URL = os.environ.get("WEATHER_API_URL", "https://api.open-meteo.com/v1/forecast")
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "15"))

# ── Cache TTLs (seconds) ──
GEOIP_CACHE_TTL = int(os.environ.get("GEOIP_CACHE_TTL", str(60 * 60 * 24)))  # 24 hours
WEATHER_CACHE_TTL = int(os.environ.get("WEATHER_CACHE_TTL", str(60 * 15)))   # 15 minutes

# 0 = unbounded / no background sweep
CACHE_MAX_SIZE = int(os.environ.get("CACHE_MAX_SIZE", "0"))
CACHE_SWEEP_INTERVAL = int(os.environ.get("CACHE_SWEEP_INTERVAL", "0"))

# Substituted for reserved/loopback client addresses when set; empty means reject with 400
FALLBACK_IP = os.environ.get("FALLBACK_IP", "").strip()
