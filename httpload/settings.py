# httpload/settings.py
import logging
import os

# Logging
LOG_LEVEL = os.getenv("HTTPLOAD_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Test defaults (used when a config omits the key)
DEFAULT_METHOD = "GET"
DEFAULT_REPEATS = 1
DEFAULT_CONCURRENCY = 1
DEFAULT_DELAY_MS = 0

# Capture levels for the per-request text log
CAPTURE_NONE = "none"
CAPTURE_SIMPLE = "simple"
CAPTURE_FULL = "full"

# Body formats
FORMAT_JSON = "json"
FORMAT_FORM = "form"
FORMAT_RAW = "raw"

CONFIG_SUFFIXES = (".yaml", ".yml")
SUMMARY_HEADER = "--- Test Results Summary ---"


def log_level(name=None):
    return getattr(logging, (name or LOG_LEVEL).upper(), logging.INFO)
