"""
Tests for the Docker-backed runtime inventory.

Uses a mocked Docker SDK client; no daemon is required.
"""

import pytest
import requests
from unittest.mock import MagicMock

from docker.errors import APIError, DockerException, NotFound

from docker_inventory import DockerInventory, RuntimeUnavailable, is_docker_unavailable
from models.docker_models import ContainerRecord, derive_description, parse_container_ports


def _summary(name, image="nginx:latest", container_id=None, ports=None, labels=None, state="running"):
    return {
        'Id': container_id or (name.replace('-', '') * 64)[:64],
        'Names': [f"/{name}"],
        'Image': image,
        'State': state,
        'Status': 'Up 5 minutes',
        'Ports': ports or [],
        'Labels': labels or {},
    }


@pytest.fixture
def mock_docker_client():
    """
    Mock Docker SDK client for testing without real Docker daemon.
    """
    client = MagicMock()
    client.api.containers = MagicMock(return_value=[])
    return client


# =============================================================================
# Container models
# =============================================================================

@pytest.mark.unit
class TestContainerRecord:

    def test_from_summary(self):
        record = ContainerRecord.from_summary(_summary(
            "plex-1",
            image="lscr.io/linuxserver/plex:latest",
            ports=[{'PrivatePort': 32400, 'PublicPort': 32400, 'Type': 'tcp', 'IP': '0.0.0.0'}],
            labels={'com.docker.compose.project': 'media'},
        ))

        assert record.raw_name == "/plex-1"
        assert record.name == "plex-1"
        assert record.base_name == "plex"
        assert record.image_name == "plex"
        assert record.first_public_port == 32400
        assert record.description == "media"
        assert record.compose_project == "media"
        assert record.short_id == record.id[:12]

    def test_summary_without_names_uses_short_id(self):
        summary = _summary("x", container_id="abc123def456" + "0" * 52)
        summary['Names'] = []

        assert ContainerRecord.from_summary(summary).raw_name == "abc123def456"

    def test_summary_without_id_is_rejected(self):
        with pytest.raises(ValueError):
            ContainerRecord.from_summary({'Names': ['/unrelated'], 'Image': 'x'})

    def test_ports_deduplicated_and_unpublished_dropped(self):
        ports = parse_container_ports([
            {'PrivatePort': 80, 'PublicPort': 8080, 'Type': 'tcp', 'IP': '0.0.0.0'},
            {'PrivatePort': 80, 'PublicPort': 8080, 'Type': 'tcp', 'IP': '::'},
            {'PrivatePort': 443, 'Type': 'tcp'},
            None,
        ])

        assert [(p.private_port, p.public_port) for p in ports] == [(80, 8080)]

    def test_description_label_priority(self):
        labels = {
            'maintainer': 'someone',
            'org.opencontainers.image.description': 'Media server',
        }
        assert derive_description(labels) == 'Media server'
        assert derive_description({}) == ''
        assert derive_description(None) == ''


# =============================================================================
# Docker availability detection
# =============================================================================

@pytest.mark.unit
class TestDockerUnavailable:

    @pytest.mark.parametrize("error", [
        ConnectionRefusedError(111, "Connection refused"),
        FileNotFoundError(2, "No such file or directory"),
        PermissionError(13, "Permission denied"),
        DockerException("Error while fetching server API version: ('Connection aborted.', "
                        "FileNotFoundError(2, 'No such file or directory'))"),
        requests.exceptions.ConnectionError("Connection aborted."),
        APIError("Service Unavailable", response=MagicMock(status_code=503)),
        Exception("Cannot connect to the Docker daemon at unix:///var/run/docker.sock. "
                  "Is the docker daemon running?"),
    ])
    def test_unavailable_errors(self, error):
        assert is_docker_unavailable(error)

    @pytest.mark.parametrize("error", [
        None,
        ValueError("bad value"),
        NotFound("No such container: abc"),
        APIError("Internal Server Error", response=MagicMock(status_code=500)),
    ])
    def test_other_errors(self, error):
        assert not is_docker_unavailable(error)

    def test_wrapped_cause_detected(self):
        try:
            try:
                raise ConnectionRefusedError(111, "refused")
            except ConnectionRefusedError as inner:
                raise DockerException("request failed") from inner
        except DockerException as outer:
            assert is_docker_unavailable(outer)


# =============================================================================
# Inventory
# =============================================================================

@pytest.mark.unit
class TestDockerInventory:

    @pytest.mark.asyncio
    async def test_list_containers(self, mock_docker_client):
        mock_docker_client.api.containers.return_value = [
            _summary("plex-1", image="linuxserver/plex:latest"),
            _summary("sonarr", state="exited"),
        ]
        inventory = DockerInventory(client=mock_docker_client)

        records = await inventory.list_containers(include_stopped=True)

        assert [r.name for r in records] == ["plex-1", "sonarr"]
        mock_docker_client.api.containers.assert_called_once_with(all=True)

    @pytest.mark.asyncio
    async def test_summaries_without_id_are_skipped(self, mock_docker_client):
        mock_docker_client.api.containers.return_value = [
            {'Names': ['/unrelated'], 'Image': 'x'},
            {'Id': None, 'Names': ['/ghost'], 'Image': 'y'},
            _summary("sonarr"),
        ]
        inventory = DockerInventory(client=mock_docker_client)

        records = await inventory.list_containers()

        assert [r.name for r in records] == ["sonarr"]

    @pytest.mark.asyncio
    async def test_running_only(self, mock_docker_client):
        inventory = DockerInventory(client=mock_docker_client)

        await inventory.list_containers(include_stopped=False)

        mock_docker_client.api.containers.assert_called_once_with(all=False)

    @pytest.mark.asyncio
    async def test_daemon_down_raises_runtime_unavailable(self, mock_docker_client):
        mock_docker_client.api.containers.side_effect = requests.exceptions.ConnectionError(
            "('Connection aborted.', ConnectionRefusedError(111, 'Connection refused'))"
        )
        inventory = DockerInventory(client=mock_docker_client)

        with pytest.raises(RuntimeUnavailable):
            await inventory.list_containers()

    @pytest.mark.asyncio
    async def test_other_engine_errors_propagate(self, mock_docker_client):
        mock_docker_client.api.containers.side_effect = APIError(
            "Internal Server Error", response=MagicMock(status_code=500)
        )
        inventory = DockerInventory(client=mock_docker_client)

        with pytest.raises(APIError):
            await inventory.list_containers()

    @pytest.mark.asyncio
    async def test_find_container_by_id(self, mock_docker_client):
        summary = _summary("plex-1", container_id="a" * 64)
        mock_docker_client.api.containers.return_value = [summary]
        mock_docker_client.containers.get.return_value = MagicMock(id="a" * 64)
        inventory = DockerInventory(client=mock_docker_client)

        record = await inventory.find_container("aaaaaaaaaaaa")

        assert record.name == "plex-1"

    @pytest.mark.asyncio
    async def test_find_container_by_base_name(self, mock_docker_client):
        mock_docker_client.api.containers.return_value = [_summary("sonarr"), _summary("plex-2")]
        mock_docker_client.containers.get.side_effect = NotFound("No such container: plex")
        inventory = DockerInventory(client=mock_docker_client)

        record = await inventory.find_container("plex")

        assert record.name == "plex-2"
        assert await inventory.find_container("radarr") is None
        assert await inventory.find_container("") is None

    def test_close_releases_client(self, mock_docker_client):
        inventory = DockerInventory(client=mock_docker_client)

        inventory.close()

        mock_docker_client.close.assert_called_once()
