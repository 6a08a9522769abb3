import asyncio
from pathlib import Path
from typing import Optional


class ContentStore:
    """Read-only blob store: one `<post_id>.html` file per content item."""

    def __init__(self, root: str | Path, suffix: str = ".html"):
        self.root = Path(root)
        self.suffix = suffix

    def path_for(self, post_id: str) -> Optional[Path]:
        # Only plain file names; anything that could walk out of root is absent
        if not post_id or post_id in (".", "..") or "/" in post_id or "\\" in post_id or "\x00" in post_id:
            return None
        return self.root / f"{post_id}{self.suffix}"

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None

    async def get(self, post_id: str) -> Optional[str]:
        path = self.path_for(post_id)
        if path is None:
            return None
        # existence check and read both happen off the event loop
        return await asyncio.to_thread(self._read, path)
