"""
Shared fakes for the unit tests: a temp SQLite store, a controllable clock,
and stand-ins for the image classifier and blob store.
"""

import asyncio
import sys
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.ext.asyncio import create_async_engine

from nagrik.core.database import build_session_factory, init_db
from nagrik.core.exceptions import MediaUploadFailed
from nagrik.models.complaint import IssueType
from nagrik.schemas.ai_outputs import ImageRelevanceOutput
from nagrik.schemas.complaint import MediaAttachment
from nagrik.services.complaint_store import ComplaintStore

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


def photo(data: bytes = JPEG_BYTES, content_type: str = "image/jpeg") -> MediaAttachment:
    return MediaAttachment(filename="pothole.jpg", content_type=content_type, data=data)


class TempDatabase:
    """File-backed SQLite database that lives for one test"""

    def __init__(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        url = f"sqlite+aiosqlite:///{Path(self._tmpdir.name) / 'test.db'}"
        self.engine = create_async_engine(url, future=True)
        self.session_factory = build_session_factory(self.engine)

    async def create(self) -> ComplaintStore:
        await init_db(self.engine)
        return ComplaintStore(self.session_factory)

    async def dispose(self):
        await self.engine.dispose()
        self._tmpdir.cleanup()


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeClassifier:
    """Returns a canned verdict, raises, or hangs"""

    def __init__(
        self,
        verdict: Optional[ImageRelevanceOutput] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.verdict = verdict
        self.error = error
        self.delay = delay
        self.calls: List[Tuple[bytes, IssueType, str]] = []

    async def check_image_relevance(self, image_bytes, issue_type, content_type="image/jpeg"):
        self.calls.append((image_bytes, issue_type, content_type))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.verdict


class FakeBlobStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.objects = {}

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        if self.fail:
            raise MediaUploadFailed("bucket unavailable")
        self.objects[name] = (data, content_type)
        return f"https://storage.test/{name}"
