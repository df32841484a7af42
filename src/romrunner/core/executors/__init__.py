"""Command executor implementations.

Provides different backends for starting launched programs:
- SubprocessExecutor: asyncio subprocess, stdin closed, output inherited
"""

from romrunner.core.executors.subprocess_executor import SubprocessExecutor

__all__ = ["SubprocessExecutor"]
