import sys
import os
from datetime import datetime
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# LOG FILTERING
# ═══════════════════════════════════════════════════════════════════════════════
# Only these scopes are shown by default.
# Everything else is gated behind PLPGEN_DEBUG.

INFO_SCOPES = {
    "STARTUP",      # Process lifecycle
    "BATCH",        # Generation job lifecycle
    "BOT",          # Wizard transitions
    "TELEGRAM",     # Bot API boundary
    "VIP",          # VIP list mutations
    "STORE",        # KV backend
    "MONITORING",   # Metrics registration
}

# DEBUG-only scopes (hidden by default)
DEBUG_SCOPES = {
    "PROGRESS",
    "TEMPLATE",
    "ARCHIVE",
}

DEBUG_MODE = os.getenv("PLPGEN_DEBUG", "false").lower() == "true"


def log(scope: str, message: str, data: Any = None, session_id: Optional[str] = None) -> None:
    """
    Unified logging function.

    Only INFO_SCOPES are shown by default.
    Set PLPGEN_DEBUG=true to see all scopes.
    """
    if not DEBUG_MODE and scope not in INFO_SCOPES:
        return

    timestamp = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{timestamp}] [{scope}]"

    if session_id:
        prefix += f" [{str(session_id)[:12]}]"

    print(f"{prefix} {message}")

    if data:
        print(f"  Data: {data}")

    sys.stdout.flush()


def log_section(scope: str, title: str, session_id: Optional[str] = None) -> None:
    """
    Log a section header with visual separator.
    """
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"\n{'='*60}")
    if session_id:
        print(f"[{timestamp}] [{scope}] [{str(session_id)[:12]}] {title}")
    else:
        print(f"[{timestamp}] [{scope}] {title}")
    print(f"{'='*60}")
    sys.stdout.flush()
