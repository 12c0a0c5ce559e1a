"""
Logging Configuration

Where and how the translation service writes its logs.
Console output is always on; rotating files are optional.
"""
import os
from pathlib import Path

# Log level for the root logger (DEBUG shows context-usage and session lines)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Rotating files under LOG_OUTPUT_DIR; disable for tests and read-only hosts
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() in ("1", "true", "yes")
LOG_OUTPUT_DIR = os.getenv("LOG_OUTPUT_DIR", str(Path(__file__).parent / "output"))

LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))

# Prompt and completion text is truncated to this many characters in log lines
LOG_PREVIEW_LENGTH = int(os.getenv("LOG_PREVIEW_LENGTH", "200"))

# =========================
# Formats
# =========================

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Console: one line per event, tagged with the inbound request
LOG_SIMPLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(request_id)-36s | %(message)s"

# Files: adds logger and function for post-mortem reading
LOG_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(request_id)-36s | "
    "%(name)-25s | %(funcName)-20s | %(message)s"
)

# Metrics file: the message is already a JSON object
LOG_JSON_FORMAT = "%(message)s"

# =========================
# Files
# =========================

LOG_FILE_REQUESTS = os.getenv("LOG_FILE_REQUESTS", "translate_llm_calls.log")
LOG_FILE_ERRORS = os.getenv("LOG_FILE_ERRORS", "translate_errors.log")
LOG_FILE_METRICS = os.getenv("LOG_FILE_METRICS", "translate_metrics.jsonl")
