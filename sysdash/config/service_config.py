"""Service health check configuration."""
from dataclasses import dataclass

PROTOCOLS = ("http", "https", "tcp")


@dataclass(frozen=True)
class ServiceSpec:
    """A named service endpoint to probe."""
    name: str
    port: int
    host: str = "localhost"
    protocol: str = "tcp"
    path: str = "/"
    timeout_ms: int = 3000

    def __post_init__(self):
        """Validate service definition."""
        if self.protocol not in PROTOCOLS:
            raise ValueError(f"Unknown protocol for service {self.name}: {self.protocol}")
        if self.timeout_ms <= 0:
            raise ValueError(f"Timeout for service {self.name} must be positive")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port for service {self.name}: {self.port}")

    @property
    def url(self) -> str:
        """URL probed for http/https services."""
        path = self.path if self.path.startswith("/") else f"/{self.path}"
        return f"{self.protocol}://{self.host}:{self.port}{path}"


DEFAULT_SERVICES = (
    ServiceSpec("frontend", 5173, protocol="http", path="/", timeout_ms=5000),
    ServiceSpec("backend", 3001, protocol="http", path="/api/monitoring/health", timeout_ms=5000),
    ServiceSpec("postgres", 5432, protocol="tcp", timeout_ms=3000),
    ServiceSpec("redis", 6379, protocol="tcp", timeout_ms=3000),
    ServiceSpec("mqtt", 1883, protocol="tcp", timeout_ms=3000),
    ServiceSpec("grafana", 3000, protocol="http", path="/api/health", timeout_ms=5000),
    ServiceSpec("prometheus", 9090, protocol="http", path="/-/healthy", timeout_ms=5000),
)
