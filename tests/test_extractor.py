"""Tests for extracting a file from a known layer."""

import pytest

from image_pkg_extractor import BytesOpener, ExtractorConfig, LayerReference
from image_pkg_extractor.exceptions import (
    FileNotFoundInLayerError,
    LinkDepthExceededError,
    SymlinkCycleError,
)
from image_pkg_extractor.tar.extractor import extract_file, resolve_link
from tests.helpers import TrackingOpener, build_image

LAYER_1 = LayerReference(path=f"{1:064x}/layer.tar")


@pytest.mark.parametrize(
    "entry_path, link_target, expected",
    [
        ("package.yaml", "../shared/package.yaml", "../shared/package.yaml"),
        ("etc/package.yaml", "../shared/package.yaml", "shared/package.yaml"),
        ("etc/crossplane/package.yaml", "./real.yaml", "etc/crossplane/real.yaml"),
        ("etc/package.yaml", "/opt/package.yaml", "opt/package.yaml"),
        ("a/b/c", "../../d", "d"),
    ],
)
def test_resolve_link(entry_path, link_target, expected):
    """Test link targets resolved against the link's directory."""
    assert resolve_link(entry_path, link_target) == expected


def test_extract_regular_file():
    """Test extracting a plain file."""
    opener = TrackingOpener(build_image([{"package.yaml": b"content-X"}]))

    with extract_file(opener, LAYER_1, "package.yaml") as extracted:
        assert extracted.read() == b"content-X"
        assert extracted.size == 9
        assert extracted.target.path == "package.yaml"
        assert extracted.target.depth == 0
        assert not opener.streams[0].closed

    assert opener.all_closed


def test_extract_symlink_to_parent_directory():
    """Test a symlink whose target leaves the link's directory."""
    data = build_image(
        [
            {
                "package.yaml": ("symlink", "../shared/package.yaml"),
                "../shared/package.yaml": b"shared content",
            }
        ]
    )

    with extract_file(BytesOpener(data), LAYER_1, "package.yaml") as extracted:
        assert extracted.read() == b"shared content"
        assert extracted.target.path == "../shared/package.yaml"
        assert extracted.target.depth == 1


def test_extract_link_chain():
    """Test following a symlink to a hardlink to a regular file."""
    opener = TrackingOpener(
        build_image(
            [
                {
                    "opt/pkg/package.yaml": b"real",
                    "etc/package.yaml": ("hardlink", "../opt/pkg/package.yaml"),
                    "package.yaml": ("symlink", "etc/package.yaml"),
                }
            ]
        )
    )

    with extract_file(opener, LAYER_1, "package.yaml") as extracted:
        assert extracted.read() == b"real"
        assert extracted.target.depth == 2

    # one pass per link hop
    assert len(opener.streams) == 3
    assert opener.all_closed


def test_extract_symlink_cycle():
    """Test that mutually pointing links fail within the hop bound."""
    opener = TrackingOpener(
        build_image([{"a.yaml": ("symlink", "b.yaml"), "b.yaml": ("symlink", "a.yaml")}])
    )

    with pytest.raises(LinkDepthExceededError) as exc_info:
        extract_file(opener, LAYER_1, "a.yaml", ExtractorConfig(max_link_depth=3))

    assert exc_info.value.layer == LAYER_1.path
    assert len(opener.streams) == 4
    assert opener.all_closed


def test_extract_self_link_default_bound():
    """Test a self-referencing link with the default bound."""
    data = build_image([{"package.yaml": ("symlink", "package.yaml")}])

    with pytest.raises(SymlinkCycleError):
        extract_file(BytesOpener(data), LAYER_1, "package.yaml")


def test_extract_dangling_link():
    """Test a link whose target is missing from the layer."""
    data = build_image([{"package.yaml": ("symlink", "missing.yaml")}])

    with pytest.raises(FileNotFoundInLayerError, match="missing.yaml not found"):
        extract_file(BytesOpener(data), LAYER_1, "package.yaml")


def test_extract_missing_layer():
    """Test an archive that no longer contains the identified layer."""
    data = build_image([{"package.yaml": b"x"}])
    layer = LayerReference(path="other/layer.tar")

    with pytest.raises(FileNotFoundInLayerError, match="Layer other/layer.tar not found"):
        extract_file(BytesOpener(data), layer, "package.yaml")


def test_extract_directory():
    """Test a target that is a directory."""
    data = build_image([{"package.yaml/": ("dir", "")}])

    with pytest.raises(FileNotFoundInLayerError, match="not a regular file"):
        extract_file(BytesOpener(data), LAYER_1, "package.yaml")


def test_extract_closes_stream_on_error():
    """Test that failed extractions release their streams."""
    opener = TrackingOpener(build_image([{"a.txt": b"a"}]))

    with pytest.raises(FileNotFoundInLayerError):
        extract_file(opener, LAYER_1, "package.yaml")

    assert opener.streams
    assert opener.all_closed
