import os

# Environment overrides for local tweaking; the Settings dialog only exposes the model name.
DEFAULT_MODEL_NAME = os.environ.get("FITSNAP_MODEL", "gemini-2.0-flash")
MAX_UPLOAD_MB = float(os.environ.get("FITSNAP_MAX_UPLOAD_MB", "10"))
MAX_UPLOAD_BYTES = int(MAX_UPLOAD_MB * 1024 * 1024)
LOG_LEVEL = os.environ.get("FITSNAP_LOG_LEVEL", "INFO").upper()

SUPPORTED_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")

GENERIC_FAILURE_MESSAGE = "Failed to analyze image. Please try another screenshot."
