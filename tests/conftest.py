import io

import pytest
from PIL import Image

from composite_studio.config import Settings
from composite_studio.preview import PreviewRenderer, ResourceRegistry
from composite_studio.selection import SelectionManager
from composite_studio.storage import ScratchStore
from composite_studio.studio import Studio


class ManualScheduler:
    """Collects decode jobs so a test decides when (and in what order) they finish."""

    def __init__(self):
        self.queue = []

    def __call__(self, job, on_done):
        self.queue.append((job, on_done))
        return f"manual-{len(self.queue)}"

    def run(self, i=0):
        job, on_done = self.queue.pop(i)
        try:
            result = job()
        except Exception as e:
            on_done(None, e)
        else:
            on_done(result, None)

    def run_all(self):
        while self.queue:
            self.run(0)


def png_bytes(size=(64, 48), color=(200, 30, 30)):
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store(tmp_path):
    return ScratchStore(str(tmp_path / "uploads"))


@pytest.fixture
def registry():
    return ResourceRegistry()


@pytest.fixture
def manager(registry, scheduler):
    return SelectionManager(PreviewRenderer(registry, scheduler=scheduler, max_px=32))


@pytest.fixture
def add_file(store):
    batch = store.new_batch()

    def _add(name, content_type, data=b"\x00" * 16):
        return store.save(batch, name, content_type, data)

    return _add


@pytest.fixture
def settings(tmp_path):
    return Settings(scratch_dir=str(tmp_path / "scratch"), log_level="DEBUG")


@pytest.fixture
def studio(manager, settings):
    return Studio(manager, settings=settings)


@pytest.fixture
def png():
    return png_bytes
