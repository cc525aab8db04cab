"""Simple demonstration of extracting a file from a synthetic saved image."""

import io
import json
import logging
import sys
import tarfile

# Add parent directory to path
sys.path.insert(0, "src")

from image_pkg_extractor import BytesOpener, FileNotFoundInAnyLayerError, fetch_file

# Set up logging
logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


def add_bytes(tar, name, content):
    info = tarfile.TarInfo(name)
    info.size = len(content)
    tar.addfile(info, fileobj=io.BytesIO(content))


def create_layer(files):
    """Create a layer tar from a name -> content mapping."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name, content in files.items():
            add_bytes(tar, name, content)
    return buf.getvalue()


def create_image():
    """Create a docker-save style archive with two layers."""
    layers = {
        "aaaa/layer.tar": create_layer({"bin/provider": b"binary"}),
        "bbbb/layer.tar": create_layer({"package.yaml": b"kind: Provider\n"}),
    }
    manifest = [{"Config": "config.json", "RepoTags": ["demo:v1.0"], "Layers": list(layers)}]

    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        add_bytes(tar, "config.json", b"{}")
        for name, content in layers.items():
            add_bytes(tar, name, content)
        add_bytes(tar, "manifest.json", json.dumps(manifest).encode("utf-8"))
    return buf.getvalue()


def main():
    opener = BytesOpener(create_image())

    content = fetch_file(opener, "package.yaml")
    logger.info(f"package.yaml: {content.decode('utf-8')!r}")

    try:
        fetch_file(opener, "crossplane.yaml")
    except FileNotFoundInAnyLayerError as e:
        logger.info(f"Expected failure: {e}")


if __name__ == "__main__":
    main()
