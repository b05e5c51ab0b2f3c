"""Core business logic: parsing, scoring, ratings and data models.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
or Prometheus; the server and metrics layers import from here.
"""
