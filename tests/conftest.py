import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings consumed at import time by MIS.main
os.environ.setdefault("SNAPSHOT_BACKEND", "memory")
os.environ.setdefault("TIMER_TICK_SECONDS", "30")
os.environ.setdefault("USE_DATABASE", "false")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="mis-logs-"))
