import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep tests independent of any local .env
os.environ.setdefault("ENDPOINT_URL", "http://graph-provider.test/rpc")
os.environ.setdefault("POLL_INTERVAL_MS", "2000")
os.environ.setdefault("RPC_METHOD", "graph")
os.environ.setdefault("SYNC_MODE", "snapshot")
