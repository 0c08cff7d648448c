"""
Docker Models for DockDash
Pydantic models for containers as reported by the Docker Engine
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from utils.container_matching import base_name, image_short_name, strip_leading_slash


logger = logging.getLogger(__name__)

# Labels consulted, in order, for a human-readable container description
DESCRIPTION_LABELS = (
    'org.opencontainers.image.description',
    'description',
    'com.docker.compose.project',
    'maintainer',
)


class PortMapping(BaseModel):
    """A single container port, optionally published on the host"""
    private_port: int
    public_port: Optional[int] = None
    protocol: str = 'tcp'


def parse_container_ports(port_list: Optional[List[Dict[str, Any]]]) -> List[PortMapping]:
    """
    Parse the Ports array of a container summary (GET /containers/json).

    Only published ports are kept, and each public port only once
    (Docker lists IPv4 and IPv6 bindings separately).

    Args:
        port_list: e.g. [{'PrivatePort': 80, 'PublicPort': 8080, 'Type': 'tcp', 'IP': '0.0.0.0'}]
    """
    if not port_list:
        return []

    ports = []
    seen_public_ports = set()
    for entry in port_list:
        if not entry or not entry.get('PublicPort'):
            continue
        public_port = entry['PublicPort']
        if public_port in seen_public_ports:
            continue
        seen_public_ports.add(public_port)
        ports.append(PortMapping(
            private_port=entry.get('PrivatePort', public_port),
            public_port=public_port,
            protocol=entry.get('Type', 'tcp'),
        ))
    return ports


def derive_description(labels: Optional[Dict[str, str]]) -> str:
    """
    Pick a description from well-known container labels.

    Example:
        >>> derive_description({'com.docker.compose.project': 'media'})
        'media'
    """
    if not labels:
        return ''
    for label in DESCRIPTION_LABELS:
        value = labels.get(label)
        if value:
            return value
    return ''


class ContainerRecord(BaseModel):
    """Container as seen by the runtime inventory (never persisted)"""
    id: str
    raw_name: str
    image: str = ''
    state: str = 'unknown'
    status: str = ''
    ports: List[PortMapping] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)

    @property
    def short_id(self) -> str:
        return self.id[:12]

    @property
    def name(self) -> str:
        """Display name without Docker's leading slash"""
        return strip_leading_slash(self.raw_name)

    @property
    def base_name(self) -> str:
        """Restart-stable match key"""
        return base_name(self.raw_name)

    @property
    def image_name(self) -> Optional[str]:
        return image_short_name(self.image)

    @property
    def first_public_port(self) -> Optional[int]:
        for port in self.ports:
            if port.public_port:
                return port.public_port
        return None

    @property
    def description(self) -> str:
        return derive_description(self.labels)

    @property
    def compose_project(self) -> Optional[str]:
        return self.labels.get('com.docker.compose.project') or None

    @classmethod
    def from_summary(cls, summary: Dict[str, Any]) -> 'ContainerRecord':
        """
        Build a record from a low-level API container summary.

        Args:
            summary: One element of APIClient.containers(all=True)
        """
        container_id = summary.get('Id')
        if not container_id:
            raise ValueError("container summary has no Id")

        names = summary.get('Names') or []
        raw_name = names[0] if names else container_id[:12]
        return cls(
            id=container_id,
            raw_name=raw_name,
            image=summary.get('Image') or '',
            state=summary.get('State') or 'unknown',
            status=summary.get('Status') or '',
            ports=parse_container_ports(summary.get('Ports')),
            labels=summary.get('Labels') or {},
        )
