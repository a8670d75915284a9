"""AMS: Agent File versioning and migration service."""

__version__ = "0.1.0"
