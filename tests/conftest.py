"""Test configuration and fixtures."""


import pytest

from image_pkg_extractor import BytesOpener
from tests.helpers import build_image


@pytest.fixture
def package_yaml():
    """Package descriptor content used across tests."""
    return b"apiVersion: meta.pkg.crossplane.io/v1\nkind: Provider\n"


@pytest.fixture
def image_bytes(package_yaml):
    """Two-layer image whose second layer holds package.yaml."""
    return build_image(
        [
            {"bin/provider": b"\x7fELF binary"},
            {"package.yaml": package_yaml, "crds/": ("dir", "")},
        ]
    )


@pytest.fixture
def opener(image_bytes):
    return BytesOpener(image_bytes)


@pytest.fixture
def image_file(tmp_path, image_bytes):
    """The image archive written to disk."""
    path = tmp_path / "image.tar"
    path.write_bytes(image_bytes)
    return path
