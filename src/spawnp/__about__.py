"""Metadata package."""

from __future__ import annotations

__title__ = "spawnp"
__package_name__ = "spawnp"
__version__ = "0.1.0"
__description__ = "asyncio wrapper for spawning commands, sequences and pipelines"
__email__ = "spawnp@git-pull.com"
__author__ = "spawnp contributors"
__github__ = "https://github.com/spawnp/spawnp"
__docs__ = "https://github.com/spawnp/spawnp#readme"
__tracker__ = "https://github.com/spawnp/spawnp/issues"
__pypi__ = "https://pypi.org/project/spawnp/"
__license__ = "MIT"
__copyright__ = "Copyright 2026- spawnp contributors"
