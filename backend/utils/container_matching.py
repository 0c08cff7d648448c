"""
Container Name Matching Utilities

Containers are recreated with new IDs on every restart or image update, and
Docker Compose appends an instance number when a service is scaled. Shortcuts
therefore track containers by a normalized "base name" rather than by ID.

This module provides the normalization primitives used by the shortcut
matcher and the icon resolver.
"""

import re
from typing import Iterable, Optional, TypeVar

# Docker Compose scale suffix, e.g. "portainer-1" or "nginx-proxy-2". A run of
# suffixes is removed as a whole so that base_name() is idempotent
INSTANCE_SUFFIX_PATTERN = re.compile(r'(?:-\d+)+$')

T = TypeVar('T')


def strip_leading_slash(name: str) -> str:
    """Remove the leading '/' the Docker API puts in front of names"""
    return name.lstrip('/')


def strip_instance_suffix(name: str) -> str:
    """Remove trailing '-<digits>' Compose instance suffixes"""
    return INSTANCE_SUFFIX_PATTERN.sub('', name)


def base_name(name: Optional[str]) -> str:
    """
    Get container base name (without instance number suffix).

    This creates a stable identifier for matching containers across restarts.

    Args:
        name: Container name (may include leading slash from Docker)

    Returns:
        Normalized base name in lowercase, or "" for empty input

    Examples:
        >>> base_name("portainer-1")
        'portainer'
        >>> base_name("nginx-proxy-2")
        'nginx-proxy'
        >>> base_name("/homeassistant")
        'homeassistant'
    """
    if not name:
        return ""
    return strip_instance_suffix(strip_leading_slash(name)).lower()


def generate_match_name(container_name: Optional[str]) -> str:
    """
    Generate the value stored in shortcuts.container_match_name.

    Same derivation as base_name(); kept as its own name so call sites that
    write the column read as such.
    """
    return base_name(container_name)


def image_short_name(image_ref: Optional[str]) -> Optional[str]:
    """
    Extract base image name from a Docker image reference.

    Examples:
        >>> image_short_name("linuxserver/plex:latest")
        'plex'
        >>> image_short_name("ghcr.io/home-assistant/core:stable")
        'core'
        >>> image_short_name("portainer/portainer-ce")
        'portainer-ce'
    """
    if not image_ref:
        return None

    # Remove version tag (e.g., :latest, :1.21-alpine)
    without_tag = image_ref.split(':')[0]

    # Last path segment is the image name, the rest is registry/namespace
    short_name = without_tag.split('/')[-1]
    return short_name or None


def names_match(name1: Optional[str], name2: Optional[str]) -> bool:
    """Check if two container names share the same non-empty base name"""
    key1 = base_name(name1)
    key2 = base_name(name2)
    if not key1 or not key2:
        return False
    return key1 == key2


def find_container_by_match_name(containers: Iterable[T], match_name: Optional[str]) -> Optional[T]:
    """
    Find the first container whose base name equals the given match name.

    Containers only need a ``raw_name`` attribute (see ContainerRecord).
    """
    target = base_name(match_name)
    if not target:
        return None

    for container in containers:
        if base_name(container.raw_name) == target:
            return container
    return None
