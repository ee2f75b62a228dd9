"""
Collection store - Logging Module
Provides centralized logging functionality for the storage layer.
"""
import os
import sys
from datetime import datetime

from . import conf

# =============================================================================
# CONFIGURATION
# =============================================================================

LOG = os.environ.get("COLLECTION_STORE_LOG", "1") != "0"
LOG_TO_STDERR = os.environ.get("COLLECTION_STORE_LOG_STDERR", "0") == "1"
LOG_FILE = conf.LOG_FILE

# =============================================================================
# LOGGING
# =============================================================================

def store_log(message: str) -> None:
    """Append log message to store.log if LOG is enabled."""
    if not LOG:
        return
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_line = f"[{timestamp}] {message}\n"
    if LOG_TO_STDERR:
        sys.stderr.write(log_line)
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(LOG_FILE, "a", encoding="utf-8") as f:
        f.write(log_line)


def store_log_print() -> None:
    """Print the contents of the log file to stdout."""
    if LOG_FILE.exists():
        log_contents = LOG_FILE.read_text(encoding="utf-8")
        if log_contents:
            print(log_contents, end="")
        else:
            print("[Collection store log is empty]")
    else:
        print("[Collection store log file does not exist]")


def store_log_clear() -> None:
    """Delete the log file."""
    if LOG_FILE.exists():
        LOG_FILE.unlink()
