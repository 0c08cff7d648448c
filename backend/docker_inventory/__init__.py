"""
Docker Inventory Module

Reads live container state from the Docker Engine.
"""

from docker_inventory.errors import RuntimeUnavailable, is_docker_unavailable
from docker_inventory.inventory import DockerInventory

__all__ = [
    'DockerInventory',
    'RuntimeUnavailable',
    'is_docker_unavailable',
]
