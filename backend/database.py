"""
Database models and operations for DockDash
Uses SQLite for persistent storage of shortcuts and sections
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable, Tuple
from sqlalchemy import create_engine, Column, String, Integer, Boolean, DateTime, ForeignKey, Text, CheckConstraint, Index, event, or_
from sqlalchemy.orm import declarative_base, sessionmaker, Session, relationship
from sqlalchemy.pool import StaticPool
import os
import logging
import threading

from models.shortcut_models import ShortcutSnapshot, identity_from_row
from utils.container_matching import generate_match_name
from utils.validators import normalize_url, is_valid_url, clean_description, is_valid_port

logger = logging.getLogger(__name__)

# Singleton instance and thread lock for DatabaseManager
# Only ONE DatabaseManager instance should exist per process so that a single
# engine owns the SQLite file
_database_manager_instance: Optional['DatabaseManager'] = None
_database_manager_lock = threading.Lock()

DEFAULT_ICON = "Server"

# Columns callers may write through update_shortcut()/insert_shortcut()
SHORTCUT_WRITABLE_FIELDS = {
    'display_name', 'description', 'icon', 'icon_type', 'port', 'url',
    'container_id', 'container_name', 'container_match_name', 'compose_project',
    'section_id', 'position', 'is_favorite', 'use_tailscale',
}


def utcnow():
    """Helper to get timezone-aware UTC datetime for database defaults"""
    return datetime.now(timezone.utc)


Base = declarative_base()


class Section(Base):
    """User-defined group of shortcuts on the dashboard"""
    __tablename__ = "sections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    position = Column(Integer, default=0)
    is_collapsed = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)

    shortcuts = relationship("Shortcut", back_populates="section", passive_deletes=True)

    __table_args__ = (
        Index('idx_sections_position', 'position'),
    )


class Shortcut(Base):
    """Dashboard shortcut, optionally linked to a container"""
    __tablename__ = "shortcuts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    display_name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, default=DEFAULT_ICON)
    icon_type = Column(String, nullable=True)  # 'lucide' | 'image' | 'upload'
    port = Column(Integer, nullable=True)
    url = Column(String, nullable=True)
    container_id = Column(String, nullable=True)  # Last-known runtime ID, changes on recreation
    container_name = Column(String, nullable=True)  # Base (de-instanced) container name
    container_match_name = Column(String, nullable=True)  # Restart-stable match key
    compose_project = Column(String, nullable=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True)
    position = Column(Integer, default=0)
    is_favorite = Column(Boolean, default=False)
    use_tailscale = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    section = relationship("Section", back_populates="shortcuts")

    __table_args__ = (
        # A custom link must never carry a match identity
        CheckConstraint(
            'container_match_name IS NULL OR container_name IS NOT NULL',
            name='ck_shortcuts_match_name_requires_container'
        ),
        Index('idx_shortcuts_section_position', 'section_id', 'position'),
        Index('idx_shortcuts_container_match', 'container_match_name'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'display_name': self.display_name,
            'description': self.description,
            'icon': self.icon,
            'icon_type': self.icon_type,
            'port': self.port,
            'url': self.url,
            'container_id': self.container_id,
            'container_name': self.container_name,
            'container_match_name': self.container_match_name,
            'compose_project': self.compose_project,
            'section_id': self.section_id,
            'position': self.position,
            'is_favorite': bool(self.is_favorite),
            'use_tailscale': bool(self.use_tailscale),
        }


def enforce_identity_invariant(fields: Dict[str, Any], current_container_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Keep container_match_name consistent with container_name in a write.

    - Clearing container_name also clears the match name.
    - Setting container_name without a match name derives one.
    - A match name on a shortcut without container_name is rejected.
    """
    fields = dict(fields)
    container_name = fields.get('container_name', current_container_name)

    if 'container_name' in fields and not fields['container_name']:
        fields['container_name'] = None
        fields['container_match_name'] = None
        return fields

    if not container_name:
        if fields.get('container_match_name'):
            raise ValueError("container_match_name requires container_name")
        return fields

    if 'container_name' in fields and not fields.get('container_match_name'):
        fields['container_match_name'] = generate_match_name(container_name)
    return fields


class DatabaseManager:
    """
    Database management and operations (Singleton)

    Multiple instantiations return the same instance so only one SQLAlchemy
    engine touches the database file.
    """

    def __new__(cls, db_path: str = "data/dashboard.db"):
        global _database_manager_instance, _database_manager_lock

        # Fast path: instance already exists
        if _database_manager_instance is not None:
            if _database_manager_instance.db_path != db_path:
                logger.warning(
                    f"DatabaseManager singleton already exists with path "
                    f"'{_database_manager_instance.db_path}', ignoring requested path '{db_path}'"
                )
            return _database_manager_instance

        with _database_manager_lock:
            # Double-check pattern: another thread might have created it while we waited
            if _database_manager_instance is not None:
                return _database_manager_instance

            instance = super(DatabaseManager, cls).__new__(cls)
            _database_manager_instance = instance
            return instance

    def __init__(self, db_path: str = "data/dashboard.db"):
        """
        Initialize database connection (only runs once for singleton).
        """
        if hasattr(self, '_initialized'):
            return

        self.db_path = db_path
        self._initialized = True

        data_dir = os.path.dirname(db_path)
        if data_dir:
            os.makedirs(data_dir, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={
                "check_same_thread": False,
                "timeout": 20
            },
            poolclass=StaticPool,
            echo=False
        )

        # SQLite only enforces ON DELETE SET NULL with foreign_keys enabled,
        # and the pragma is per-connection
        event.listen(self.engine, "connect", self._set_sqlite_pragmas)

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        Base.metadata.create_all(bind=self.engine)

        self._secure_database_file()

        # Rows created before match names existed
        self.backfill_match_names()

    @staticmethod
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
        finally:
            cursor.close()

    def _secure_database_file(self):
        """Set secure permissions on database file (rw for owner only)"""
        try:
            if os.path.exists(self.db_path):
                os.chmod(self.db_path, 0o600)
        except OSError as e:
            logger.warning(f"Could not set permissions on database file {self.db_path}: {e}")

    def get_session(self) -> Session:
        """Get a database session"""
        return self.SessionLocal()

    # Shortcut Operations
    def get_shortcuts(self) -> List[Shortcut]:
        """Get all shortcuts in dashboard order"""
        with self.get_session() as session:
            return session.query(Shortcut).order_by(
                Shortcut.section_id.asc(),
                Shortcut.position.asc(),
                Shortcut.display_name.asc()
            ).all()

    def get_shortcut(self, shortcut_id: int) -> Optional[Shortcut]:
        """Get a specific shortcut"""
        with self.get_session() as session:
            return session.query(Shortcut).filter(Shortcut.id == shortcut_id).first()

    def get_container_shortcuts(self) -> List[ShortcutSnapshot]:
        """
        Get shortcuts linked to a container, as detached snapshots.

        Custom links (no container_name) are never returned.
        """
        with self.get_session() as session:
            rows = session.query(Shortcut).filter(
                Shortcut.container_name.isnot(None),
                Shortcut.container_name != ''
            ).order_by(Shortcut.id.asc()).all()

            return [
                ShortcutSnapshot(
                    id=row.id,
                    display_name=row.display_name,
                    identity=identity_from_row(row.container_name, row.container_match_name, row.container_id),
                    port=row.port,
                    icon=row.icon,
                )
                for row in rows
            ]

    def insert_shortcut(self, fields: Dict[str, Any]) -> int:
        """
        Insert a shortcut row and return its ID.

        Low-level write used by sync; create_shortcut() validates user input.
        """
        unknown = set(fields) - SHORTCUT_WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown shortcut fields: {sorted(unknown)}")

        fields = enforce_identity_invariant(fields)
        with self.get_session() as session:
            try:
                shortcut = Shortcut(**fields)
                session.add(shortcut)
                session.commit()
                logger.info(f"Added shortcut '{shortcut.display_name}' ({shortcut.id}) to database")
                return shortcut.id
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to add shortcut to database: {e}")
                raise

    def create_shortcut(self, display_name: str, description: str = None, icon: str = None,
                        port: Any = None, url: str = None, container_name: str = None,
                        container_id: str = None, is_favorite: bool = False,
                        use_tailscale: bool = False, section_id: int = None,
                        compose_project: str = None) -> Shortcut:
        """Validate user input and create a shortcut"""
        if not display_name or not display_name.strip():
            raise ValueError("Display name is required and cannot be empty")

        if not port and not url and not container_name and not container_id:
            raise ValueError("Either port, URL, or container must be specified")

        if port and not is_valid_port(port):
            raise ValueError("Invalid port number. Must be between 1 and 65535")

        final_url = None
        if url:
            if not is_valid_url(url):
                raise ValueError(f"Invalid URL format: {url}")
            final_url = normalize_url(url)

        icon_value = icon or DEFAULT_ICON
        if icon and icon.startswith(('http://', 'https://')):
            if not is_valid_url(icon):
                raise ValueError(f"Invalid icon URL format: {icon}")
            icon_value = normalize_url(icon)

        fields = {
            'display_name': display_name.strip(),
            'description': clean_description(description),
            'icon': icon_value,
            'port': int(port) if port else None,
            'url': final_url,
            'container_name': generate_match_name(container_name) or None,
            'container_id': container_id,
            'is_favorite': bool(is_favorite),
            'use_tailscale': bool(use_tailscale),
            'section_id': section_id,
            'compose_project': compose_project,
        }
        return self.get_shortcut(self.insert_shortcut(fields))

    def update_shortcut(self, shortcut_id: int, fields: Dict[str, Any]) -> Optional[Shortcut]:
        """Update a shortcut; returns None if it does not exist"""
        unknown = set(fields) - SHORTCUT_WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown shortcut fields: {sorted(unknown)}")

        with self.get_session() as session:
            try:
                shortcut = session.query(Shortcut).filter(Shortcut.id == shortcut_id).first()
                if not shortcut:
                    return None

                for key, value in enforce_identity_invariant(fields, shortcut.container_name).items():
                    setattr(shortcut, key, value)
                shortcut.updated_at = utcnow()
                session.commit()
                session.refresh(shortcut)
                logger.debug(f"Updated shortcut {shortcut_id}: {sorted(fields)}")
                return shortcut
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to update shortcut {shortcut_id} in database: {e}")
                raise

    def delete_shortcut(self, shortcut_id: int) -> bool:
        """Delete a shortcut (user action only, sync never deletes)"""
        with self.get_session() as session:
            try:
                shortcut = session.query(Shortcut).filter(Shortcut.id == shortcut_id).first()
                if not shortcut:
                    return False
                session.delete(shortcut)
                session.commit()
                logger.info(f"Deleted shortcut {shortcut_id}")
                return True
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to delete shortcut {shortcut_id}: {e}")
                raise

    def set_favorite(self, shortcut_id: int, is_favorite: bool) -> bool:
        return self.update_shortcut(shortcut_id, {'is_favorite': bool(is_favorite)}) is not None

    def reorder_shortcuts(self, positions: Iterable[Tuple[int, int]]) -> int:
        """
        Apply (shortcut_id, position) pairs in a single transaction.

        Returns:
            Number of shortcuts updated
        """
        with self.get_session() as session:
            try:
                updated = 0
                for shortcut_id, position in positions:
                    updated += session.query(Shortcut).filter(
                        Shortcut.id == shortcut_id
                    ).update({'position': position}, synchronize_session=False)
                session.commit()
                return updated
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to reorder shortcuts: {e}")
                raise

    def backfill_match_names(self) -> int:
        """
        Populate container_match_name for container-linked rows missing it.

        Custom links (no container_name) are left without a match name.

        Returns:
            Number of shortcuts updated
        """
        with self.get_session() as session:
            try:
                rows = session.query(Shortcut).filter(
                    Shortcut.container_match_name.is_(None),
                    Shortcut.container_name.isnot(None),
                    Shortcut.container_name != ''
                ).all()

                updated = 0
                for row in rows:
                    match_name = generate_match_name(row.container_name)
                    if match_name:
                        row.container_match_name = match_name
                        updated += 1

                if updated:
                    session.commit()
                    logger.info(f"Populated container_match_name for {updated} shortcuts")
                return updated
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to populate container_match_name: {e}")
                raise

    def get_icon_migration_candidates(self, catalog_prefix: str, default_icon: str = DEFAULT_ICON) -> List[Shortcut]:
        """
        Container-linked shortcuts whose icon is not from the icon catalog.

        Args:
            catalog_prefix: URL prefix of catalog icons (e.g. the CDN base URL)
            default_icon: Placeholder icon name that always qualifies
        """
        with self.get_session() as session:
            return session.query(Shortcut).filter(
                Shortcut.container_name.isnot(None),
                or_(
                    Shortcut.icon.is_(None),
                    Shortcut.icon == default_icon,
                    ~Shortcut.icon.startswith(catalog_prefix)
                )
            ).order_by(Shortcut.id.asc()).all()

    # Section Operations
    def create_section(self, name: str) -> Section:
        if not name or not name.strip():
            raise ValueError("Section name cannot be empty")

        with self.get_session() as session:
            try:
                last = session.query(Section).order_by(Section.position.desc()).first()
                section = Section(name=name.strip(), position=(last.position + 1) if last else 0)
                session.add(section)
                session.commit()
                session.refresh(section)
                logger.info(f"Created section '{section.name}' ({section.id})")
                return section
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to create section: {e}")
                raise

    def get_sections(self) -> List[Section]:
        with self.get_session() as session:
            return session.query(Section).order_by(Section.position.asc()).all()

    def delete_section(self, section_id: int) -> bool:
        """Delete a section; its shortcuts move back to the unsectioned area"""
        with self.get_session() as session:
            try:
                section = session.query(Section).filter(Section.id == section_id).first()
                if not section:
                    return False
                session.delete(section)
                session.commit()
                logger.info(f"Deleted section {section_id}")
                return True
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to delete section {section_id}: {e}")
                raise
