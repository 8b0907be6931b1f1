"""gelflog public API."""

from .api import configure, get_logger, publish_stats, shutdown
from .handlers.gelf_udp import GELFUDPConfig, GELFUDPHandler, build_gelf_udp_handler
from .version import __version__

__all__ = [
    "configure",
    "get_logger",
    "publish_stats",
    "shutdown",
    "GELFUDPConfig",
    "GELFUDPHandler",
    "build_gelf_udp_handler",
    "__version__",
]
