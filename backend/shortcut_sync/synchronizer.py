"""
Shortcut synchronization pass.

Reconciles live containers with persisted shortcuts:
- matched shortcuts get their container name/match name/ID/port corrected
- containers without a shortcut get one, with a validated icon
- shortcuts without a container are left alone (deletion is a user action)

This is the only place that writes shortcuts during sync; the matcher and
the icon resolver are query-only.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from database import DatabaseManager
from docker_inventory import DockerInventory, RuntimeUnavailable
from icons.resolver import IconResolver, DEFAULT_ICON
from models.docker_models import ContainerRecord
from models.shortcut_models import ContainerLinked, identity_columns
from shortcut_sync.errors import StorageWriteFailure
from shortcut_sync.matcher import MatchPair, match_containers

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of one synchronization pass"""
    created: int = 0
    updated: int = 0
    total: int = 0
    failed: int = 0
    ambiguous: int = 0
    docker_available: bool = True
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ShortcutSynchronizer:
    """Runs synchronization passes against one store and one Docker engine"""

    def __init__(self, db: DatabaseManager, inventory: DockerInventory, resolver: IconResolver,
                 default_icon: str = DEFAULT_ICON):
        self.db = db
        self.inventory = inventory
        self.resolver = resolver
        self.default_icon = default_icon

    async def synchronize(self) -> SyncResult:
        """
        Run one pass.

        Never raises for an unreachable Docker daemon: the pass reports zero
        work instead. Individual write failures are logged and counted in
        ``failed``.
        """
        logger.info("Starting shortcut sync")

        try:
            containers = await self.inventory.list_containers(include_stopped=True)
        except RuntimeUnavailable as e:
            logger.warning(f"Docker is not running, skipping shortcut sync: {e.message}")
            return SyncResult(
                docker_available=False,
                message="Docker is not running. No containers to sync.",
            )

        shortcuts = self.db.get_container_shortcuts()
        logger.info(f"Found {len(containers)} containers and {len(shortcuts)} container shortcuts")

        match = match_containers(containers, shortcuts)
        result = SyncResult(total=len(containers), ambiguous=len(match.ambiguous))

        for pair in match.corrections:
            try:
                self._apply_corrections(pair)
                result.updated += 1
            except StorageWriteFailure as e:
                logger.error(f"Sync update failed: {e.message}")
                result.failed += 1

        for container in match.unmatched_containers:
            try:
                await self._create_shortcut(container)
                result.created += 1
            except StorageWriteFailure as e:
                logger.error(f"Sync create failed: {e.message}")
                result.failed += 1

        result.message = (
            f"Created {result.created} new shortcuts, updated {result.updated} existing shortcuts "
            f"from {result.total} containers"
        )
        if result.failed:
            result.message += f" ({result.failed} failed)"

        logger.info(f"Shortcut sync completed: {result.message}")
        return result

    def _apply_corrections(self, pair: MatchPair):
        shortcut = pair.shortcut
        logger.info(
            f"Updating shortcut '{shortcut.display_name}' ({shortcut.id}) "
            f"via {pair.strategy.value}: {sorted(pair.corrections)}"
        )
        try:
            self.db.update_shortcut(shortcut.id, pair.corrections)
        except SQLAlchemyError as e:
            raise StorageWriteFailure(
                f"Failed to update shortcut {shortcut.id}: {e}",
                shortcut_id=shortcut.id,
            ) from e

    async def _create_shortcut(self, container: ContainerRecord) -> int:
        icon = await self.resolver.resolve_for_container(container, default=self.default_icon, validate=True)
        identity = ContainerLinked(
            container_name=container.base_name,
            match_name=container.base_name,
            container_id=container.id,
        )
        fields = {
            'display_name': container.name,
            'description': container.description,
            'icon': icon,
            'port': container.first_public_port,
            'compose_project': container.compose_project,
            'is_favorite': False,
            **identity_columns(identity),
        }

        logger.info(f"Creating shortcut for container '{container.name}'")
        try:
            return self.db.insert_shortcut(fields)
        except SQLAlchemyError as e:
            raise StorageWriteFailure(
                f"Failed to create shortcut for container {container.name}: {e}",
                container_name=container.name,
            ) from e
