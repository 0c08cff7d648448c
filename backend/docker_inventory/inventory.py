"""
Runtime inventory provider backed by the Docker Engine API
"""

import logging
from typing import List, Optional

import docker
from docker.errors import DockerException, NotFound

from docker_inventory.errors import RuntimeUnavailable, raise_if_unavailable
from models.docker_models import ContainerRecord
from utils.async_docker import async_docker_call
from utils.container_matching import base_name

logger = logging.getLogger(__name__)


class DockerInventory:
    """
    Lists containers from a local Docker Engine.

    The client is created lazily so that constructing the inventory never
    fails when Docker is down; the first call reports it instead.
    """

    def __init__(self, base_url: str = "unix:///var/run/docker.sock", client: Optional[docker.DockerClient] = None, timeout: int = 30):
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> docker.DockerClient:
        if self._client is None:
            self._client = docker.DockerClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def close(self):
        if self._client is not None:
            try:
                self._client.close()
            except Exception as e:
                logger.debug(f"Error closing Docker client: {e}")
            self._client = None

    async def list_containers(self, include_stopped: bool = True) -> List[ContainerRecord]:
        """
        List containers on the engine.

        Raises:
            RuntimeUnavailable: Docker daemon cannot be reached
            DockerException: Any other engine error
        """
        try:
            client = await async_docker_call(self._get_client)
            summaries = await async_docker_call(client.api.containers, all=include_stopped)
        except RuntimeUnavailable:
            raise
        except Exception as e:
            raise_if_unavailable(e, "inventory")
            logger.error(f"Failed to list containers: {e}", exc_info=True)
            raise

        records = []
        for summary in summaries or []:
            if not summary:
                continue
            try:
                records.append(ContainerRecord.from_summary(summary))
            except ValueError as e:
                logger.warning(f"Skipping malformed container summary {(summary.get('Id') or '?')[:12]}: {e}")

        logger.debug(f"Inventory returned {len(records)} containers")
        return records

    async def find_container(self, name_or_id: str) -> Optional[ContainerRecord]:
        """
        Find a container by ID, exact name, or base name.

        Lookup by ID comes first; otherwise the first container whose name or
        base name matches wins.
        """
        if not name_or_id:
            return None

        try:
            client = await async_docker_call(self._get_client)
            container = await async_docker_call(client.containers.get, name_or_id)
            records = await self.list_containers(include_stopped=True)
            for record in records:
                if record.id == container.id:
                    return record
        except NotFound:
            pass
        except RuntimeUnavailable:
            raise
        except DockerException as e:
            raise_if_unavailable(e, "find_container")
            logger.debug(f"Direct lookup of {name_or_id} failed: {e}")

        target = base_name(name_or_id)
        for record in await self.list_containers(include_stopped=True):
            if record.name == name_or_id or record.base_name == target:
                return record
        return None
