"""Configuration from environment variables (.env)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_NETWORKS = "polkadot,kusama,acala,astar,moonbeam,bifrost"


@dataclass
class Config:
    project_root: Path
    logs_dir: Path
    networks: list[str]  # Selectable network names, in display order
    squid_base_url: str
    page_size: int
    min_display_seconds: float  # Anti-flicker: minimum time "searching" stays visible
    request_timeout: float

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        logs_dir = os.getenv("CALAMAR_LOGS_DIR")
        return cls(
            project_root=project_root,
            logs_dir=Path(logs_dir) if logs_dir else project_root / "logs",
            networks=[n.strip() for n in os.getenv("CALAMAR_NETWORKS", DEFAULT_NETWORKS).split(",") if n.strip()],
            squid_base_url=os.getenv("CALAMAR_SQUID_BASE_URL", "https://squid.subsquid.io").rstrip("/"),
            page_size=int(os.getenv("CALAMAR_PAGE_SIZE", "10")),
            min_display_seconds=float(os.getenv("CALAMAR_MIN_DISPLAY_SECONDS", "1.0")),
            request_timeout=float(os.getenv("CALAMAR_REQUEST_TIMEOUT", "10.0")),
        )

    def validate(self) -> list[str]:
        errors = []
        if not self.networks:
            errors.append("No selectable networks configured (CALAMAR_NETWORKS)")
        if self.page_size <= 0:
            errors.append(f"Page size must be positive: {self.page_size}")
        if self.min_display_seconds < 0:
            errors.append(f"Minimum display time must not be negative: {self.min_display_seconds}")
        if self.request_timeout <= 0:
            errors.append(f"Request timeout must be positive: {self.request_timeout}")
        return errors


config = Config.load()
