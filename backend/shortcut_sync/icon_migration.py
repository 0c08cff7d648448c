"""
Icon migration for existing shortcuts.

Older shortcuts carry generic icon names or hand-picked images. The migration
re-resolves icons for container-linked shortcuts against the override table
and the dashboard-icons catalog, keeping the current icon whenever nothing
better is found.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from database import DatabaseManager
from docker_inventory import DockerInventory, RuntimeUnavailable
from icons.resolver import IconResolver, DEFAULT_ICON
from utils.container_matching import find_container_by_match_name

logger = logging.getLogger(__name__)


@dataclass
class IconMigrationCheck:
    needs_migration: bool
    count: int
    shortcuts: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class IconMigrationResult:
    success: bool
    message: str
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class IconMigrator:
    """Finds and upgrades shortcut icons that do not come from the catalog"""

    def __init__(self, db: DatabaseManager, inventory: DockerInventory, resolver: IconResolver,
                 default_icon: str = DEFAULT_ICON):
        self.db = db
        self.inventory = inventory
        self.resolver = resolver
        self.default_icon = default_icon

    def check(self) -> IconMigrationCheck:
        """List container-linked shortcuts whose icon is not a catalog icon"""
        candidates = self.db.get_icon_migration_candidates(self.resolver.base_url + '/', self.default_icon)
        return IconMigrationCheck(
            needs_migration=len(candidates) > 0,
            count=len(candidates),
            shortcuts=[
                {
                    'id': s.id,
                    'display_name': s.display_name,
                    'description': s.description,
                    'icon': s.icon,
                }
                for s in candidates
            ],
        )

    async def migrate(self) -> IconMigrationResult:
        """Re-resolve icons of every container-linked shortcut"""
        shortcuts = self.db.get_container_shortcuts()
        if not shortcuts:
            return IconMigrationResult(success=True, message="No shortcuts with containers found")

        try:
            containers = await self.inventory.list_containers(include_stopped=True)
        except RuntimeUnavailable:
            logger.warning("Icon migration: Docker is not running")
            return IconMigrationResult(
                success=False,
                message="Docker is not running. Please start Docker and try again.",
                total=len(shortcuts),
            )

        result = IconMigrationResult(success=True, message="", total=len(shortcuts))

        for shortcut in shortcuts:
            container = find_container_by_match_name(containers, shortcut.identity.lookup_name)
            if container:
                new_icon = await self.resolver.resolve_for_container(container, default=None, validate=True)
            else:
                new_icon = await self.resolver.resolve(
                    shortcut.identity.container_name or shortcut.display_name,
                    default=None,
                    validate=True,
                )

            if not new_icon:
                result.skipped += 1
                continue

            if new_icon == shortcut.icon:
                continue

            try:
                self.db.update_shortcut(shortcut.id, {'icon': new_icon, 'icon_type': 'image'})
                result.updated += 1
            except SQLAlchemyError as e:
                logger.error(f"Failed to update icon of shortcut {shortcut.id}: {e}")
                result.failed += 1

        result.message = self._summary(result.updated, result.skipped)
        logger.info(f"Icon migration finished: {result.message}")
        return result

    @staticmethod
    def _summary(updated: int, skipped: int) -> str:
        if updated and skipped:
            return (f"Updated {updated} icon(s) from the icon catalog. "
                    f"Preserved {skipped} custom icon(s) with no catalog match.")
        if updated:
            return f"Successfully updated {updated} icon(s) from the icon catalog"
        if skipped:
            return f"No updates made. {skipped} shortcut(s) have no catalog match."
        return "No changes were made"
