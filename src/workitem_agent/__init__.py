"""Queue-draining workitem agent."""

__version__ = "0.1.0"
