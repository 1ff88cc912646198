import os


def _get_int(name: str, default: str) -> int:
    return int(os.getenv(name, default).strip() or default)


def _get_float(name: str, default: str) -> float:
    return float(os.getenv(name, default).strip() or default)


def _get_str(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or default).strip()


# --------------------------------------------------
# Logging
# --------------------------------------------------
LOG_LEVEL = _get_str("LOG_LEVEL", "WARNING").upper()

# --------------------------------------------------
# Spec cache
# --------------------------------------------------
CACHE_MAX_ENTRIES = _get_int("OAS_CACHE_MAX_ENTRIES", "1024")
CACHE_IDLE_SECONDS = _get_float("OAS_CACHE_IDLE_SECONDS", "600")

# --------------------------------------------------
# Spec loading
# --------------------------------------------------
FETCH_TIMEOUT = _get_float("OAS_FETCH_TIMEOUT", "30.0")

# Extra directory searched for named specs before the bundled resources
RESOURCE_DIR = _get_str("OAS_RESOURCE_DIR", "")
