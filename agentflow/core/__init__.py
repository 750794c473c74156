# Shared runtime plumbing

from agentflow.core.logging import configure_logging

__all__ = [
    "configure_logging",
]
