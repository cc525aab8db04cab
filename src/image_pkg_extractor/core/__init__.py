"""Core building blocks: configuration, archive openers and the Docker daemon client."""
