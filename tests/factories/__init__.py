"""Test factories for creating test data."""

from tests.factories.agentfiles import AgentFileFactory, patch_migration, script_migration

__all__ = ["AgentFileFactory", "patch_migration", "script_migration"]
