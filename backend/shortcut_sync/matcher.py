"""
Container identity matching.

Pairs live containers with persisted container-linked shortcuts. Container
IDs change whenever a container is recreated and Compose appends instance
numbers when scaling, so three progressively looser strategies are tried:

1. RUNTIME_ID  - the shortcut's last-known container ID is still live
2. MATCH_KEY   - base names are equal ("Plex-1" ~ "plex")
3. IMAGE_NAME  - legacy rows that stored an image name ("plex") instead of
                 a container name, for containers named differently from
                 their image

Each strategy runs over all remaining shortcuts before the next one starts,
and a matched container leaves the candidate pool. Nothing here performs
I/O; writes are proposed as per-pair corrections.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from models.docker_models import ContainerRecord
from models.shortcut_models import ShortcutSnapshot
from utils.container_matching import base_name

logger = logging.getLogger(__name__)


class MatchStrategy(Enum):
    RUNTIME_ID = "runtime_id"
    MATCH_KEY = "match_key"
    IMAGE_NAME = "image_name"


@dataclass
class AmbiguousMatch:
    """Two live containers reduce to the same match key; only the first is used"""
    match_key: str
    kept: ContainerRecord
    dropped: ContainerRecord


@dataclass
class MatchPair:
    shortcut: ShortcutSnapshot
    container: ContainerRecord
    strategy: MatchStrategy
    corrections: Dict[str, Any] = field(default_factory=dict)

    @property
    def needs_update(self) -> bool:
        return bool(self.corrections)


@dataclass
class MatchResult:
    pairs: List[MatchPair] = field(default_factory=list)
    unmatched_containers: List[ContainerRecord] = field(default_factory=list)
    unmatched_shortcuts: List[ShortcutSnapshot] = field(default_factory=list)
    ambiguous: List[AmbiguousMatch] = field(default_factory=list)

    @property
    def corrections(self) -> List[MatchPair]:
        return [pair for pair in self.pairs if pair.needs_update]


def _same_runtime_id(stored_id: Optional[str], container: ContainerRecord) -> bool:
    # Accept both 12-char short IDs and full 64-char IDs; anything shorter
    # on either side is too weak to identify a container
    if not stored_id or len(stored_id) < 12 or len(container.id) < 12:
        return False
    return container.id.startswith(stored_id) or stored_id.startswith(container.id)


def _image_name_matches(lookup_name: str, container: ContainerRecord) -> bool:
    image_name = container.image_name
    if not image_name or not lookup_name:
        return False
    image_name = image_name.lower()
    # Only containers named differently from their image; otherwise the
    # match key strategy already covers them
    if image_name == container.base_name:
        return False
    return image_name in (lookup_name.lower(), base_name(lookup_name))


def propose_corrections(shortcut: ShortcutSnapshot, container: ContainerRecord) -> Dict[str, Any]:
    """
    Fields to write so the shortcut tracks the container it matched.

    The port is only filled in when the shortcut has none, so a port the
    user chose is never overwritten.
    """
    corrections = {}
    identity = shortcut.identity
    target_name = container.base_name

    if identity.container_name != target_name:
        corrections['container_name'] = target_name
    if identity.match_name != target_name:
        corrections['container_match_name'] = target_name
    if identity.container_id != container.id:
        corrections['container_id'] = container.id

    port = container.first_public_port
    if shortcut.port is None and port is not None:
        corrections['port'] = port

    return corrections


def match_containers(containers: Sequence[ContainerRecord], shortcuts: Sequence[ShortcutSnapshot]) -> MatchResult:
    """
    Pair containers with shortcuts.

    Deterministic for the same input order: containers are considered in
    inventory order and shortcuts in persisted order.

    Args:
        containers: Live containers from the runtime inventory
        shortcuts: Container-linked shortcuts (custom links must be excluded)

    Returns:
        MatchResult with matched pairs (and their proposed corrections),
        containers to create shortcuts for, shortcuts left untouched, and
        containers dropped as ambiguous.
    """
    result = MatchResult()

    # Candidate pool keyed by match key; the first container for a key wins
    pool: Dict[str, ContainerRecord] = {}
    for container in containers:
        key = container.base_name
        if not key:
            continue
        if key in pool:
            ambiguous = AmbiguousMatch(match_key=key, kept=pool[key], dropped=container)
            result.ambiguous.append(ambiguous)
            logger.warning(
                f"Containers '{pool[key].name}' and '{container.name}' share match key '{key}', "
                f"ignoring '{container.name}'"
            )
            continue
        pool[key] = container

    remaining = list(shortcuts)

    def take(shortcut: ShortcutSnapshot, key: str, strategy: MatchStrategy):
        container = pool.pop(key)
        result.pairs.append(MatchPair(
            shortcut=shortcut,
            container=container,
            strategy=strategy,
            corrections=propose_corrections(shortcut, container),
        ))

    # Strategy 1: exact runtime ID
    unmatched = []
    for shortcut in remaining:
        hit = next(
            (key for key, container in pool.items()
             if _same_runtime_id(shortcut.identity.container_id, container)),
            None
        )
        if hit is not None:
            take(shortcut, hit, MatchStrategy.RUNTIME_ID)
        else:
            unmatched.append(shortcut)
    remaining = unmatched

    # Strategy 2: match key equality
    unmatched = []
    for shortcut in remaining:
        key = base_name(shortcut.identity.lookup_name)
        if key and key in pool:
            take(shortcut, key, MatchStrategy.MATCH_KEY)
        else:
            unmatched.append(shortcut)
    remaining = unmatched

    # Strategy 3: legacy image-name fallback
    unmatched = []
    for shortcut in remaining:
        hit = next(
            (key for key, container in pool.items()
             if _image_name_matches(shortcut.identity.lookup_name, container)),
            None
        )
        if hit is not None:
            logger.info(
                f"Legacy match by image name: shortcut '{shortcut.display_name}' "
                f"({shortcut.identity.lookup_name}) -> container '{pool[hit].name}'"
            )
            take(shortcut, hit, MatchStrategy.IMAGE_NAME)
        else:
            unmatched.append(shortcut)

    result.unmatched_shortcuts = unmatched
    result.unmatched_containers = list(pool.values())
    return result
