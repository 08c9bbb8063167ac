from typing import Optional


class MirrorError(Exception):
    """Base for every condition that aborts a mirror run."""


class MalformedState(MirrorError):
    pass


class ConsistencyViolation(MirrorError):
    def __init__(self, orphans):
        self.orphans = sorted(orphans)
        listed = ", ".join(str(i) for i in self.orphans)
        super().__init__(
            f"chapter directories exist without a record: {listed} "
            f"(a previous run was interrupted; inspect or remove them)"
        )


class UpstreamFailure(MirrorError):
    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        detail = f"HTTP {status}" if status is not None else reason or "request failed"
        if status is not None and reason:
            detail = f"{detail} ({reason})"
        super().__init__(f"{url}: {detail}")


class UnsupportedMediaType(MirrorError):
    def __init__(self, url: str, media_type: str):
        self.url = url
        self.media_type = media_type
        super().__init__(f"{url}: unsupported Content-Type '{media_type}'")


class LocalIOFailure(MirrorError):
    pass
