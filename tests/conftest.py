# tests/conftest.py
from typing import List, Optional

import pytest

from setup.config_models import AppSettings
from ybactl.base_service import BaseService, ServiceStatus, StatusType

TEST_SYMBOLS = {
    "info": "ℹ️",
    "warning": "!",
    "error": "❌",
    "success": "✅",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
}


@pytest.fixture
def app_settings(tmp_path, monkeypatch):
    """Settings rooted under tmp_path, unaffected by YBA_* variables of the host."""
    monkeypatch.delenv("YBA_INSTALL_ROOT", raising=False)
    monkeypatch.delenv("YBA_YBACTL_ROOT", raising=False)
    return AppSettings(
        install_root=tmp_path / "yugabyte",
        ybactl_root=tmp_path / "yba-ctl",
        service_username="yugabyte",
        symbols=dict(TEST_SYMBOLS),
    )


@pytest.fixture
def existing_pg_settings(app_settings):
    """Settings for an externally managed postgres with client tools configured."""
    return app_settings.model_copy(
        update={
            "postgres": app_settings.postgres.model_copy(
                update={
                    "install": app_settings.postgres.install.model_copy(update={"enabled": False}),
                    "use_existing": app_settings.postgres.use_existing.model_copy(
                        update={
                            "enabled": True,
                            "host": "db.example.com",
                            "port": 5433,
                            "username": "yba",
                            "password": "s3cret",
                            "pg_dump_path": "/usr/bin/pg_dump",
                            "pg_restore_path": "/usr/bin/pg_restore",
                        }
                    ),
                }
            )
        }
    )


class FakeService(BaseService):
    """Service double that records every lifecycle call into a shared journal."""

    def __init__(
        self,
        name: str,
        app_settings: AppSettings,
        journal: List[str],
        status_type: StatusType = StatusType.RUNNING,
        fail_on: Optional[str] = None,
    ):
        super().__init__(app_settings, "2.20.1.0-b97")
        self.name = name
        self.journal = journal
        self.status_type = status_type
        self.fail_on = fail_on

    def _record(self, operation: str) -> None:
        self.journal.append(f"{operation}:{self.name}")
        if operation == self.fail_on:
            raise RuntimeError(f"{self.name} {operation} exploded")

    def install(self) -> None:
        self._record("install")

    def upgrade(self) -> None:
        self._record("upgrade")

    def start(self) -> None:
        self._record("start")

    def stop(self) -> None:
        self._record("stop")

    def restart(self) -> None:
        self._record("restart")

    def status(self) -> ServiceStatus:
        self.journal.append(f"status:{self.name}")
        return self._make_status(self.status_type)


@pytest.fixture
def journal():
    return []


@pytest.fixture
def make_fake_service(app_settings, journal):
    def _make(name: str, **kwargs) -> FakeService:
        return FakeService(name, app_settings, journal, **kwargs)

    return _make
