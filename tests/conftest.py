from pathlib import Path

import httpx
import pytest

from main import create_app
from shared.config.settings import Settings

SITE_URL = "https://reader.example"
ADMIN_KEY = "operator-key"


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "private_posts"
    root.mkdir()
    (root / "p1.html").write_text("<h1>Post one</h1>", encoding="utf-8")
    (root / "p2.html").write_text("<h1>Post two</h1>", encoding="utf-8")
    return root


@pytest.fixture
def settings(tmp_path: Path, content_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret="test-secret",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'orders.sqlite'}",
        content_dir=str(content_dir),
        site_url=SITE_URL,
        admin_api_key=ADMIN_KEY,
        metrics_enabled=False,
        rate_limit_enabled=False,
        otlp_endpoint=None,
    )


@pytest.fixture
async def app(settings: Settings):
    application = create_app(settings)
    # ASGITransport does not run startup events
    await application.state.db.create_all()
    yield application
    await application.state.db.dispose()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def db_session(app):
    async with app.state.db.sessionmaker() as session:
        yield session


@pytest.fixture
def issuer(app):
    return app.state.issuer
