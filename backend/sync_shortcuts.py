#!/usr/bin/env python3
"""
DockDash Shortcut Sync Tool
Command-line utility to sync container shortcuts with the Docker engine
"""

import sys
import asyncio
import argparse
import logging

from config.paths import ensure_data_dirs
from config.settings import AppConfig, setup_logging
from database import DatabaseManager
from docker_inventory import DockerInventory
from icons import HttpExistenceChecker, IconOverrideTable, IconResolver
from shortcut_sync import IconMigrator, ShortcutSynchronizer

logger = logging.getLogger(__name__)


def build_components(config=AppConfig):
    """Wire the store, inventory and icon resolver from configuration"""
    config.validate()
    db = DatabaseManager(config.DATABASE_PATH)
    inventory = DockerInventory(base_url=config.docker_url())
    overrides = IconOverrideTable.from_file(config.ICON_MAPPINGS_FILE)
    resolver = IconResolver(
        overrides,
        checker=HttpExistenceChecker(timeout=config.ICON_CHECK_TIMEOUT),
        base_url=config.ICON_BASE_URL,
    )
    return db, inventory, resolver


async def run(args) -> int:
    db, inventory, resolver = build_components()
    try:
        if args.list:
            shortcuts = db.get_shortcuts()
            if not shortcuts:
                print("No shortcuts found in database.")
            for shortcut in shortcuts:
                target = shortcut.container_name or shortcut.url or (f":{shortcut.port}" if shortcut.port else "-")
                print(f"  [{shortcut.id}] {shortcut.display_name} -> {target}  ({shortcut.icon})")
            return 0

        migrator = IconMigrator(db, inventory, resolver, default_icon=AppConfig.DEFAULT_ICON)

        if args.check_icons:
            check = migrator.check()
            if not check.needs_migration:
                print("All container shortcuts use catalog icons.")
                return 0
            print(f"{check.count} shortcut(s) could use a catalog icon:")
            for entry in check.shortcuts:
                print(f"  [{entry['id']}] {entry['display_name']} ({entry['icon']})")
            return 0

        if args.migrate_icons:
            result = await migrator.migrate()
            print(result.message)
            return 0 if result.success else 1

        synchronizer = ShortcutSynchronizer(db, inventory, resolver, default_icon=AppConfig.DEFAULT_ICON)
        result = await synchronizer.synchronize()
        print(result.message)
        print(f"Created: {result.created}  Updated: {result.updated}  Containers: {result.total}")
        return 0 if result.failed == 0 else 1
    finally:
        inventory.close()
        await resolver.aclose()


def main():
    parser = argparse.ArgumentParser(description="DockDash Shortcut Sync Tool")
    parser.add_argument("--list", "-l", action="store_true", help="List all shortcuts")
    parser.add_argument("--check-icons", action="store_true", help="List shortcuts that need an icon migration")
    parser.add_argument("--migrate-icons", action="store_true", help="Re-resolve icons of container shortcuts")
    parser.add_argument("--log-level", default=None, help="Override DOCKDASH_LOG_LEVEL")

    args = parser.parse_args()

    ensure_data_dirs()
    setup_logging(args.log_level)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nOperation cancelled.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
