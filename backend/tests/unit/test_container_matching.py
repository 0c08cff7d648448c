"""
Tests for container name normalization.

Base names are what keeps a shortcut attached to its container after the
container is recreated (new ID) or scaled by Compose (instance suffix).
"""

import pytest

from utils.container_matching import (
    base_name,
    find_container_by_match_name,
    generate_match_name,
    image_short_name,
    names_match,
)


@pytest.mark.unit
class TestBaseName:

    @pytest.mark.parametrize("raw,expected", [
        ("portainer-1", "portainer"),
        ("/homeassistant", "homeassistant"),
        ("nginx-proxy-2", "nginx-proxy"),
        ("Plex", "plex"),
        ("/Sonarr-12", "sonarr"),
        ("app-v2", "app-v2"),
        ("redis-10-1", "redis"),
        ("//double", "double"),
    ])
    def test_base_name(self, raw, expected):
        assert base_name(raw) == expected

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty_input_returns_empty_string(self, raw):
        assert base_name(raw) == ""

    @pytest.mark.parametrize("raw", [
        "portainer-1", "/homeassistant", "nginx-proxy-2", "/A-1-2", "x", "-1", "/", "Name_With_Underscores-3",
    ])
    def test_idempotent(self, raw):
        assert base_name(base_name(raw)) == base_name(raw)

    def test_match_name_is_base_name(self):
        assert generate_match_name("/Portainer-1") == "portainer"
        assert generate_match_name(None) == ""


@pytest.mark.unit
class TestImageShortName:

    @pytest.mark.parametrize("image,expected", [
        ("linuxserver/plex:latest", "plex"),
        ("ghcr.io/home-assistant/core:stable", "core"),
        ("nginx:1.21-alpine", "nginx"),
        ("portainer/portainer-ce", "portainer-ce"),
        ("redis", "redis"),
    ])
    def test_image_short_name(self, image, expected):
        assert image_short_name(image) == expected

    @pytest.mark.parametrize("image", [None, "", "registry.local/"])
    def test_unusable_reference_returns_none(self, image):
        assert image_short_name(image) is None


@pytest.mark.unit
class TestNamesMatch:

    def test_instance_and_case_differences_match(self):
        assert names_match("/Plex-1", "plex")

    def test_different_names_do_not_match(self):
        assert not names_match("plex", "jellyfin")

    def test_empty_names_never_match(self):
        assert not names_match("", "")
        assert not names_match(None, "plex")


@pytest.mark.unit
def test_find_container_by_match_name(make_container):
    containers = [make_container("sonarr"), make_container("plex-1"), make_container("plex-2")]

    found = find_container_by_match_name(containers, "plex")

    assert found is containers[1]
    assert find_container_by_match_name(containers, "radarr") is None
    assert find_container_by_match_name(containers, None) is None
