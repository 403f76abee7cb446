"""
Configuration settings for XML-RPC clients and servers
"""
import os
from typing import Dict, Any
from dataclasses import dataclass, field


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class CapabilityConfig:
    """Negotiated wire extensions and resource limits used by the codec"""
    allow_nil: bool = False
    allow_bigint: bool = False
    max_nesting_depth: int = 64

    def __post_init__(self):
        if self.max_nesting_depth < 1:
            raise ValueError("max_nesting_depth must be at least 1")

    @classmethod
    def default(cls) -> "CapabilityConfig":
        """Create default configuration (no extensions)"""
        return cls()

    @classmethod
    def from_env(cls) -> "CapabilityConfig":
        """Create config from environment variables"""
        return cls(
            allow_nil=_env_flag("SEAM_XMLRPC_ALLOW_NIL", False),
            allow_bigint=_env_flag("SEAM_XMLRPC_ALLOW_BIGINT", False),
            max_nesting_depth=int(os.getenv("SEAM_XMLRPC_MAX_DEPTH", "64")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "allow_nil": self.allow_nil,
            "allow_bigint": self.allow_bigint,
            "max_nesting_depth": self.max_nesting_depth,
        }


@dataclass
class ClientConfig:
    """Configuration for Client sessions"""
    capabilities: CapabilityConfig = field(default_factory=CapabilityConfig)
    parser: str = "expat"
    writer: str = "simple"
    async_workers: int = 4

    @classmethod
    def default(cls) -> "ClientConfig":
        return cls()

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            capabilities=CapabilityConfig.from_env(),
            parser=os.getenv("SEAM_XMLRPC_PARSER", "expat"),
            async_workers=int(os.getenv("SEAM_XMLRPC_ASYNC_WORKERS", "4")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capabilities": self.capabilities.to_dict(),
            "parser": self.parser,
            "writer": self.writer,
            "async_workers": self.async_workers,
        }


@dataclass
class ServerConfig:
    """Configuration for Server sessions"""
    capabilities: CapabilityConfig = field(default_factory=CapabilityConfig)
    parser: str = "expat"
    writer: str = "simple"
    enable_introspection: bool = False
    enable_multicall: bool = False

    # Tracing configuration
    service_name: str = "seam_xmlrpc.server"

    @classmethod
    def default(cls) -> "ServerConfig":
        return cls()

    @classmethod
    def from_env(cls) -> "ServerConfig":
        return cls(
            capabilities=CapabilityConfig.from_env(),
            parser=os.getenv("SEAM_XMLRPC_PARSER", "expat"),
            enable_introspection=_env_flag("SEAM_XMLRPC_INTROSPECTION", False),
            enable_multicall=_env_flag("SEAM_XMLRPC_MULTICALL", False),
            service_name=os.getenv("SEAM_XMLRPC_SERVICE_NAME", "seam_xmlrpc.server"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capabilities": self.capabilities.to_dict(),
            "parser": self.parser,
            "writer": self.writer,
            "enable_introspection": self.enable_introspection,
            "enable_multicall": self.enable_multicall,
            "service_name": self.service_name,
        }
