"""
Shared fixtures for the redirect & attribution tests.

Storage fixtures come in both flavours (SQLite on a temp file, in-memory)
so backend-agnostic behaviour is checked against each.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from tg_redirect.core.rate_limit import limiter
from tg_redirect.core.setting import Settings
from tg_redirect.core.types import ClickAttribution, CodeMapping, UTMParams
from tg_redirect.core.utils import utc_now_iso
from tg_redirect.db.memory_adapter import MemoryStorage
from tg_redirect.db.sqlite_adapter import SQLiteStorage
from tg_redirect.main import create_app
from tg_redirect.services.code_cache import CodeCache
from tg_redirect.services.code_codec import CodeCodec
from tg_redirect.services.slugs import SlugConfig, SlugRegistry

TEST_SECRET = "test-signing-secret-with-at-least-32-chars"
TEST_SALT = "test-ip-salt"

TEST_SLUGS = [
    {"slug": "promo", "type": "bot", "mode": "302", "destination": "SalesBot"},
    {"slug": "support", "type": "bot", "mode": "shim", "destination": "SupportBot",
     "description": "Talk to support"},
    {"slug": "welcome", "type": "bot", "mode": "302", "destination": "SupportBot",
     "defaultStartParam": "welcome"},
    {"slug": "community", "type": "public", "mode": "shim", "destination": "ExampleCommunity"},
    {"slug": "vip", "type": "invite", "mode": "302", "destination": "ABCdef123456"},
    {"slug": "retired", "type": "bot", "mode": "302", "destination": "OldBot", "active": False},
]


def make_mapping(code: str, slug: str = "promo", bot_username: str = "SalesBot", **utm) -> CodeMapping:
    """Build an unresolved mapping for tests."""
    now = utc_now_iso()
    return CodeMapping(
        code=code,
        attribution=ClickAttribution(
            slug=slug,
            timestamp=now,
            utm=UTMParams(**utm),
            extra_params={"ref": "ad1"},
            ip_hash="abcdef0123456789",
            user_agent="Mozilla/5.0",
            request_id="req-1",
        ),
        bot_username=bot_username,
        created_at=now,
        resolved=False,
    )


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are process-wide; start every test from zero."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def codec():
    return CodeCodec(TEST_SECRET)


@pytest.fixture
def cache():
    return CodeCache(max_size=100, ttl_seconds=300)


@pytest.fixture
def slug_registry():
    return SlugRegistry([SlugConfig.model_validate(entry) for entry in TEST_SLUGS])


@pytest.fixture
def memory_storage():
    return MemoryStorage(max_click_logs=100)


@pytest_asyncio.fixture
async def sqlite_storage(tmp_path):
    storage = SQLiteStorage(f"sqlite+aiosqlite:///{tmp_path / 'attribution.db'}")
    await storage.init()
    yield storage
    await storage.close()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def storage(request, tmp_path):
    """Each backend in turn."""
    if request.param == "memory":
        backend = MemoryStorage(max_click_logs=100)
    else:
        backend = SQLiteStorage(f"sqlite+aiosqlite:///{tmp_path / 'attribution.db'}")
    await backend.init()
    yield backend
    await backend.close()


@pytest.fixture
def test_settings():
    return Settings(
        CODE_SIGNING_SECRET=TEST_SECRET,
        IP_HASH_SALT=TEST_SALT,
        STORAGE_BACKEND="memory",
    )


@pytest.fixture
def client(test_settings, memory_storage, slug_registry):
    app = create_app(test_settings, storage=memory_storage, slugs=slug_registry)
    with TestClient(app) as test_client:
        yield test_client
