from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    base_dir: Path = Path("manga")
    worker_count: int = 4
    request_delay: float = 0.05
    request_timeout: float = 60.0
    show_progress: bool = True
    recover_orphans: bool = False
    source_base: str = "https://mangapill.com"
    anilist_api: str = "https://graphql.anilist.co"
    user_agent: str = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"

    def __post_init__(self):
        self.base_dir = Path(self.base_dir)
        if self.worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {self.worker_count}")

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.user_agent,
            "Accept": "*/*",
        }
