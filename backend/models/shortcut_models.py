"""
Shortcut identity types.

A persisted shortcut either points at a container (and is kept in sync with
it) or is a custom link to a URL/port. Only container-linked shortcuts carry
a match name, which is why the two cases are separate types rather than a
row with nullable columns.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union, Any

from utils.container_matching import generate_match_name


@dataclass(frozen=True)
class ContainerLinked:
    """Shortcut bound to a container by its restart-stable name"""
    container_name: str
    match_name: str
    container_id: Optional[str] = None

    def __post_init__(self):
        if not self.container_name:
            raise ValueError("container_name is required for a container-linked shortcut")

    @property
    def lookup_name(self) -> str:
        """Name the matcher compares against (match name wins over container name)"""
        return self.match_name or self.container_name


@dataclass(frozen=True)
class CustomLink:
    """Shortcut to a URL or port with no container behind it"""
    url: Optional[str] = None
    port: Optional[int] = None


ShortcutIdentity = Union[ContainerLinked, CustomLink]


def identity_from_row(container_name: Optional[str],
                      container_match_name: Optional[str] = None,
                      container_id: Optional[str] = None,
                      url: Optional[str] = None,
                      port: Optional[int] = None) -> ShortcutIdentity:
    """
    Build the tagged identity from a shortcut's nullable columns.

    A row without container_name is a CustomLink even if a stale match name
    is present.
    """
    if not container_name:
        return CustomLink(url=url, port=port)
    return ContainerLinked(
        container_name=container_name,
        match_name=container_match_name or "",
        container_id=container_id,
    )


def identity_columns(identity: ShortcutIdentity) -> Dict[str, Any]:
    """Column values to persist for an identity"""
    if isinstance(identity, ContainerLinked):
        return {
            'container_name': identity.container_name,
            'container_match_name': identity.match_name or generate_match_name(identity.container_name),
            'container_id': identity.container_id,
        }
    return {
        'container_name': None,
        'container_match_name': None,
        'container_id': None,
    }


@dataclass
class ShortcutSnapshot:
    """
    Detached view of a container-linked shortcut handed to the matcher.

    Decoupled from the ORM row so matching stays free of session state.
    """
    id: int
    display_name: str
    identity: ContainerLinked
    port: Optional[int] = None
    icon: Optional[str] = None
