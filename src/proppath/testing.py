from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass

import pytest

from .config import PROPPATH_CONFIG, LogLevel, ProppathConfig


@dataclass(frozen=True)
class _ProppathConfigSnapshot:
    log_level: LogLevel
    rich_console: bool
    validate_on_write: bool

    @classmethod
    def capture(cls) -> "_ProppathConfigSnapshot":
        return cls(
            log_level=PROPPATH_CONFIG.log_level,
            rich_console=PROPPATH_CONFIG.rich_console,
            validate_on_write=PROPPATH_CONFIG.validate_on_write,
        )

    def restore(self) -> None:
        PROPPATH_CONFIG.log_level = self.log_level
        PROPPATH_CONFIG.rich_console = self.rich_console
        PROPPATH_CONFIG.validate_on_write = self.validate_on_write


def _apply_test_config() -> ProppathConfig:
    PROPPATH_CONFIG.log_level = "DEBUG"
    PROPPATH_CONFIG.rich_console = False
    PROPPATH_CONFIG.validate_on_write = True
    return PROPPATH_CONFIG


@contextmanager
def proppath_test_env() -> Generator[ProppathConfig, None, None]:
    """Apply deterministic settings and restore the previous ones on exit."""
    snapshot = _ProppathConfigSnapshot.capture()
    config = _apply_test_config()
    try:
        yield config
    finally:
        snapshot.restore()


@pytest.fixture()
def proppath_config() -> Generator[ProppathConfig, None, None]:
    """Configure proppath for the test and restore settings afterwards."""
    with proppath_test_env() as config:
        yield config
