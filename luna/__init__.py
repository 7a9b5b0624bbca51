"""File, terminal and tool-registry building blocks, execution policies and session stores for coding agents."""

__version__ = "0.1.0"