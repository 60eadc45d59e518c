import logging
import os
import threading
from dataclasses import dataclass, replace, asdict
from typing import Optional

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """configuration for parallel evaluation and collection"""
    max_workers: Optional[int] = None  # none -> os.cpu_count()
    chunk_size: int = 256

    def __post_init__(self):
        if self.max_workers is not None and (not isinstance(self.max_workers, int) or self.max_workers < 1):
            raise InvalidArgumentError(f"max_workers must be a positive int or None, got {self.max_workers!r}")
        if not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            raise InvalidArgumentError(f"chunk_size must be a positive int, got {self.chunk_size!r}")

    @property
    def workers(self) -> int:
        """effective pool size"""
        return self.max_workers or os.cpu_count() or 1


_lock = threading.Lock()
_active = EngineConfig()


def get_config() -> EngineConfig:
    return _active


def configure(**overrides) -> EngineConfig:
    """
    replace the active configuration with a copy carrying the given overrides.
    a change of max_workers disposes the shared pool, the next parallel
    terminal operation recreates it at the new size.
    """
    global _active
    with _lock:
        previous = _active
        _active = replace(previous, **overrides)
    logger.debug(f"engine config: {asdict(_active)}")
    if _active.workers != previous.workers:
        from .parallel import shutdown_pool
        shutdown_pool()
    return _active


def reset_config() -> EngineConfig:
    """restore the defaults"""
    return configure(**asdict(EngineConfig()))
