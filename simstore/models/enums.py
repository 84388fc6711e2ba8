from enum import Enum

# Upload lifecycle phases
class UploadPhase(str, Enum):
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadPhase.CANCELLED, UploadPhase.COMPLETED, UploadPhase.FAILED)


class StorageBackendKind(str, Enum):
    MEMORY = "memory"
    FILE = "file"
