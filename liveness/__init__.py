"""liveness package exports."""

from liveness.config import LIBRARY_VERSION as __version__
from liveness.errors import HeartbeatConfigError, StoreError
from liveness.healthcheck import healthcheck
from liveness.module import NOOP_HEARTBEAT, ModuleHeartbeat, NoopModuleHeartbeat
from liveness.store import RecordStore

__all__ = [
    "__version__",
    "HeartbeatConfigError",
    "ModuleHeartbeat",
    "NOOP_HEARTBEAT",
    "NoopModuleHeartbeat",
    "RecordStore",
    "StoreError",
    "healthcheck",
]
