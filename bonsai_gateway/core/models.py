from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional
import uuid, time


def now_ms() -> int:
    return int(time.time() * 1000)


class JobState(str, Enum):
    running = "running"
    completed = "completed"
    failed = "failed"


@dataclass
class ScrapingJob:
    sources: list[str]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: JobState = JobState.running
    progress: int = 0
    servers_found: int = 0
    started_at: int = field(default_factory=now_ms)
    completed_at: Optional[int] = None
    current_source: Optional[str] = None
    errors: list[dict] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.status == JobState.running

    def to_api(self) -> dict:
        d = asdict(self)
        d["status"] = self.status.value
        if d["error"] is None:
            d.pop("error")
        return d
