"""
Shared pytest fixtures for DockDash tests.

Fixtures provided:
- test_db: Temporary SQLite session with all tables
- db_manager: Fresh DatabaseManager on a temporary file (singleton reset)
- make_container: Factory for ContainerRecord objects as the inventory returns them
- make_shortcut: Factory for container-linked shortcut snapshots
- override_table: Small icon override table
- existence_checker: AsyncMock existence checker (returns True)
- mock_inventory: Inventory whose list_containers() is an AsyncMock

Note: containers are never stored in the database - they come from Docker.
The database only stores shortcuts and sections.
"""

import pytest
import tempfile
import os
from unittest.mock import MagicMock, AsyncMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import database
from database import Base, DatabaseManager
from icons.overrides import IconOverrideTable
from models.docker_models import ContainerRecord, PortMapping
from models.shortcut_models import ContainerLinked, ShortcutSnapshot

CATALOG = "https://cdn.jsdelivr.net/gh/homarr-labs/dashboard-icons"


@pytest.fixture(scope="function")
def test_db():
    """
    Create a temporary SQLite database for testing.

    Yields a session; the database file is removed afterwards.
    """
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    engine = create_engine(f'sqlite:///{db_path}')

    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def db_manager(tmp_path, monkeypatch):
    """
    DatabaseManager backed by a fresh file.

    DatabaseManager is a process-wide singleton, so the module-level
    instance is cleared before and restored after each test.
    """
    monkeypatch.setattr(database, '_database_manager_instance', None)
    manager = DatabaseManager(str(tmp_path / 'dashboard.db'))

    yield manager

    manager.engine.dispose()


@pytest.fixture
def make_container():
    """Build ContainerRecord objects with sensible defaults"""
    def _make(name: str, image: str = None, container_id: str = None, ports=None, labels=None, state='running'):
        return ContainerRecord(
            id=container_id or (name.strip('/').replace('-', '').ljust(12, '0') * 6)[:64],
            raw_name=name if name.startswith('/') else f"/{name}",
            image=image if image is not None else f"{name.strip('/')}:latest",
            state=state,
            ports=[PortMapping(private_port=p, public_port=p) for p in (ports or [])],
            labels=labels or {},
        )
    return _make


@pytest.fixture
def make_shortcut():
    """Build container-linked shortcut snapshots"""
    def _make(shortcut_id: int, container_name: str, match_name: str = "", container_id: str = None,
              port: int = None, icon: str = "Server", display_name: str = None):
        return ShortcutSnapshot(
            id=shortcut_id,
            display_name=display_name or container_name,
            identity=ContainerLinked(
                container_name=container_name,
                match_name=match_name,
                container_id=container_id,
            ),
            port=port,
            icon=icon,
        )
    return _make


@pytest.fixture
def override_table():
    return IconOverrideTable({
        'docker-controller-bot': 'https://example.com/icons/docker-controller-bot.png',
        'core': f'{CATALOG}/png/home-assistant.png',
        'lscr.io/linuxserver/code-server': 'https://example.com/icons/vscode.png',
    })


@pytest.fixture
def existence_checker():
    """Existence checker stub; every URL exists unless a test says otherwise"""
    checker = MagicMock()
    checker.exists = AsyncMock(return_value=True)
    checker.aclose = AsyncMock()
    return checker


@pytest.fixture
def mock_inventory():
    """Runtime inventory stub returning no containers"""
    inventory = MagicMock()
    inventory.list_containers = AsyncMock(return_value=[])
    return inventory
