# sitebuilder/utils/config.py
import os

from dotenv import load_dotenv

load_dotenv()

# upstream (v0 Platform API)
V0_API_KEY_ENV = "V0_API_KEY"
V0_API_BASE = os.environ.get("V0_API_BASE", "https://api.v0.dev/v1").rstrip("/")
V0_TIMEOUT = int(os.environ.get("V0_TIMEOUT", 300))

# relay server
HOST = os.environ.get("SITEBUILDER_HOST", "0.0.0.0")
PORT = int(os.environ.get("SITEBUILDER_PORT", 3001))
LOG_LEVEL = os.environ.get("SITEBUILDER_LOG_LEVEL", "INFO").upper()

# raw payload dumps for debugging upstream shape changes
LOG_DIR = os.environ.get("AI_BACKEND_LOG_DIR", "./ai_backend_logs")
DEBUG_DUMPS = os.environ.get("SITEBUILDER_DEBUG_DUMPS", "").lower() in ("1", "true", "yes", "on")

# terminal client
RELAY_URL = os.environ.get("SITEBUILDER_RELAY_URL", "http://localhost:3001").rstrip("/")
RELAY_TIMEOUT = int(os.environ.get("SITEBUILDER_RELAY_TIMEOUT", V0_TIMEOUT + 30))

AVAILABLE_ENDPOINTS = ["/api/health", "/api/chat"]


def get_api_key():
    """Read the v0 credential at call time so tests and reloads see env changes."""
    return os.environ.get(V0_API_KEY_ENV) or None
