"""Example usage of the async package API against a local Docker daemon."""

import asyncio
import logging
import sys

# Add parent directory to path
sys.path.insert(0, "src")

from image_pkg_extractor import (
    ExtractorError,
    check_daemon_connectivity,
    fetch_package_content,
    save_package,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main(image: str):
    """Read and cache the package descriptor of ``image``."""
    try:
        logger.info("Checking Docker daemon connectivity...")
        if not await check_daemon_connectivity():
            logger.error("✗ Docker daemon is not reachable")
            return

        content = await fetch_package_content(image)
        logger.info(f"package.yaml of {image}:\n{content}")

        digest = await save_package(image, "package.yaml.gz")
        logger.info(f"✓ Cached descriptor in package.yaml.gz ({digest})")

    except ExtractorError as e:
        logger.error(f"Extraction failed during {e.phase or 'unknown'} phase: {e}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "crossplane/provider-nop:v0.2.1"))
