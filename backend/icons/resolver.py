"""
Container icon resolution

Maps container/image names to icons from the Homarr dashboard-icons catalog
(https://github.com/homarr-labs/dashboard-icons), served through jsDelivr.
Curated overrides take priority over the catalog at every normalization
stage, so a generic strip/split step never shadows an explicit mapping
(e.g. "docker-controller-bot" must not become "docker").
"""

import logging
from typing import Callable, Optional, Protocol, Tuple

from icons.overrides import IconOverrideTable
from models.docker_models import ContainerRecord
from utils.container_matching import strip_instance_suffix, strip_leading_slash

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_BASE_URL = "https://cdn.jsdelivr.net/gh/homarr-labs/dashboard-icons"
DEFAULT_ICON = "Server"


class ExistenceChecker(Protocol):
    async def exists(self, url: str) -> bool:
        ...


class IconValidationFailure(Exception):
    """Catalog icon does not exist or could not be checked."""

    def __init__(self, url: str, reason: str):
        self.message = f"{url}: {reason}"
        super().__init__(self.message)
        self.url = url
        self.reason = reason


def _drop_version_tag(key: str) -> str:
    return key.split(':')[0]


def _drop_vendor_prefix(key: str) -> str:
    # "lscr.io/linuxserver/plex" -> "plex"
    return key.split('/')[-1]


def _underscore_prefix(key: str) -> str:
    # "paperless_ngx" -> "paperless"; hyphens are left alone because the
    # catalog itself uses them ("home-assistant")
    return key.split('_')[0] or key


# Evaluated in order; each result is checked against the override table
# before the next stage runs
ICON_KEY_STAGES: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ('raw', lambda key: strip_leading_slash(key.strip().lower())),
    ('de-versioned', _drop_version_tag),
    ('de-vendored', _drop_vendor_prefix),
    ('de-instanced', strip_instance_suffix),
    ('underscore', _underscore_prefix),
)


def icon_lookup_key(raw: Optional[str], overrides: IconOverrideTable) -> str:
    """
    Normalize a container or image name into an icon catalog key.

    Returns the first stage result present in the override table, otherwise
    the result of the last stage. Returns "" for empty input.

    Examples:
        >>> icon_lookup_key("lscr.io/linuxserver/plex:latest", IconOverrideTable())
        'plex'
        >>> icon_lookup_key("/portainer-1", IconOverrideTable())
        'portainer'
    """
    if not raw:
        return ""

    key = raw
    for stage, transform in ICON_KEY_STAGES:
        key = transform(key)
        if key in overrides:
            logger.debug(f"Icon override hit for '{raw}' at stage '{stage}': {key}")
            return key
    return key


class IconResolver:
    """
    Resolve a best-effort icon for a container.

    Returns either an override URL, a catalog URL or the caller's default
    icon name. Never raises.
    """

    def __init__(self, overrides: IconOverrideTable, checker: Optional[ExistenceChecker] = None,
                 base_url: str = DEFAULT_CATALOG_BASE_URL):
        self.overrides = overrides
        self.checker = checker
        self.base_url = base_url.rstrip('/')

    async def aclose(self):
        """Release the existence checker's HTTP client, if it has one"""
        close = getattr(self.checker, 'aclose', None)
        if close is not None:
            await close()

    def catalog_url(self, key: str) -> str:
        return f"{self.base_url}/png/{key}.png"

    def is_catalog_url(self, url: Optional[str]) -> bool:
        return bool(url) and url.startswith(f"{self.base_url}/")

    def is_override_url(self, url: Optional[str]) -> bool:
        return bool(url) and self.overrides.has_url(url)

    def override_for(self, name: Optional[str]) -> Optional[str]:
        """Override URL for a name, if any normalization stage hits the table"""
        key = icon_lookup_key(name, self.overrides)
        return self.overrides.get(key) if key else None

    def resolve_url(self, name: Optional[str]) -> Optional[str]:
        """Unvalidated icon URL for a name, or None for empty input"""
        key = icon_lookup_key(name, self.overrides)
        if not key:
            return None
        if key in self.overrides:
            return self.overrides[key]
        return self.catalog_url(key)

    async def _validate(self, url: str):
        if self.checker is None:
            return
        try:
            exists = await self.checker.exists(url)
        except Exception as e:
            raise IconValidationFailure(url, f"existence check errored: {e}") from e
        if not exists:
            raise IconValidationFailure(url, "not found in icon catalog")

    async def resolve(self, name: Optional[str], default: Optional[str] = DEFAULT_ICON, validate: bool = False) -> Optional[str]:
        """
        Resolve the icon for a container or image name.

        Args:
            name: Container name or image reference
            default: Icon name returned when nothing usable is found
            validate: Check that catalog URLs exist before returning them.
                Bulk preview paths skip this; the frontend falls back on
                image load errors.
        """
        url = self.resolve_url(name)
        if not url:
            return default

        # Overrides are trusted
        if self.is_override_url(url):
            return url

        if validate:
            try:
                await self._validate(url)
            except IconValidationFailure as e:
                logger.info(f"Catalog icon not usable for '{name}', using default: {e.reason}")
                return default

        return url

    async def resolve_for_container(self, container: ContainerRecord, default: Optional[str] = DEFAULT_ICON,
                                    validate: bool = False) -> Optional[str]:
        """
        Resolve the icon for a live container.

        An override keyed on either the image reference or the container name
        wins; otherwise the catalog is consulted by image name, falling back
        to the container name for images without a usable name.
        """
        for name in (container.image, container.name):
            override = self.override_for(name)
            if override:
                return override

        return await self.resolve(container.image_name or container.name, default=default, validate=validate)
