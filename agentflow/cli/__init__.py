"""AgentFlow command line interface."""

from agentflow.cli.main import cli

__all__ = ["cli"]
