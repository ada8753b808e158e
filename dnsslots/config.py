from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .dispatcher import DEFAULT_WORKERS
from .resolver import DEFAULT_TIMEOUT, GOOGLE_DNS
from .slots import DEFAULT_SLOTS_FILE


@dataclass
class Config:
    output_file: Optional[str] = None
    slots_file: str = str(DEFAULT_SLOTS_FILE)
    workers: int = DEFAULT_WORKERS
    verbose: bool = False
    resolve_dns: bool = False
    resolver: str = GOOGLE_DNS
    timeout: float = DEFAULT_TIMEOUT

    @property
    def slots_path(self) -> Path:
        return Path(self.slots_file)
