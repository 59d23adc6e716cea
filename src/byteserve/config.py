"""Static configuration for byteserve."""

from dataclasses import dataclass

__version__ = "0.1.0"


@dataclass(frozen=True)
class ServerConfig:
    """
    Static server settings.

    Attributes:
        server_name: Product token sent in the ``Server`` header
        version: Version appended to the product token
        chunk_size: Read size when streaming a whole file (default: 64 KiB)
        range_fallback_max: Largest remote object downloaded whole when the
            upstream ignores ``Range`` (default: 10 MiB)
        connect_timeout: Remote source connection timeout in seconds
        read_timeout: Remote source read timeout in seconds
    """
    server_name: str = "byteserve"
    version: str = __version__
    chunk_size: int = 64 * 1024
    range_fallback_max: int = 10 * 1024 * 1024
    connect_timeout: float = 10.0
    read_timeout: float = 60.0

    @property
    def server_header(self) -> str:
        return f"{self.server_name} {self.version}"

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


DEFAULT_CONFIG = ServerConfig()
