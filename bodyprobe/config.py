from dataclasses import dataclass, replace


@dataclass
class HarnessConfig:
    host: str = "127.0.0.1"
    port: int = 8080
    client_host: str = "localhost"
    dump_limit: int = 1024
    read_timeout: float = 2.0
    settle_delay: float = 0.1
    request_timeout: float = 10.0

    @property
    def url(self):
        return f"http://{self.client_host}:{self.port}"

    def with_port(self, port):
        """Copy of this config pointing at another port"""
        return replace(self, port=port)
