"""Server configuration from environment variables and command-line flags.

Command-line flags win over environment variables, which win over defaults.
"""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

TRANSPORTS = ("stdio", "sse", "streamable-http")

# Default bind addresses per HTTP transport
DEFAULT_BIND_ADDRESSES = {
    "sse": "127.0.0.1:8000",
    "streamable-http": "127.0.0.1:8001",
}

DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(Exception):
    """Raised when server configuration is invalid."""


@dataclass(frozen=True)
class ServerConfig:
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def bind_address(self) -> str:
        return f"{self.host}:{self.port}"


def _parse_bind_address(address: str) -> tuple[str, int]:
    host, sep, port_str = address.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"Invalid BIND_ADDRESS: {address}. Use 'host:port'")
    try:
        port = int(port_str)
    except ValueError as exc:
        raise ConfigError(f"Invalid BIND_ADDRESS port: {port_str}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"Invalid BIND_ADDRESS port: {port}")
    return host, port


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Finance Engine MCP server")
    parser.add_argument("--transport", choices=TRANSPORTS, help="MCP transport (default: stdio)")
    parser.add_argument("--bind", help="host:port for the sse and streamable-http transports")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    return parser


def load_config(
    argv: Optional[Sequence[str]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """Load server configuration.

    Environment:
        FINANCE_ENGINE_TRANSPORT: stdio, sse, or streamable-http.
        BIND_ADDRESS: host:port for HTTP transports.
        LOG_LEVEL: logging level name.
    """
    env = os.environ if env is None else env
    args = build_arg_parser().parse_args(argv)

    transport = args.transport or env.get("FINANCE_ENGINE_TRANSPORT", "stdio")
    if transport not in TRANSPORTS:
        raise ConfigError(f"Invalid FINANCE_ENGINE_TRANSPORT: {transport}. Use one of {', '.join(TRANSPORTS)}")

    log_level = (args.log_level or env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"Invalid LOG_LEVEL: {log_level}")

    bind = args.bind or env.get("BIND_ADDRESS") or DEFAULT_BIND_ADDRESSES.get(transport, DEFAULT_BIND_ADDRESSES["sse"])
    host, port = _parse_bind_address(bind)

    return ServerConfig(transport=transport, host=host, port=port, log_level=log_level)
