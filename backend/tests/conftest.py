import pytest
from unittest.mock import AsyncMock
from httpx import AsyncClient, ASGITransport

from produto_api.main import app
from produto_api.limiter import limiter
from produto_api.repositories.produto_repository import ProdutoRepository, get_produto_repository


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are process-wide; start every test from zero."""
    limiter.reset()
    yield


@pytest.fixture
def mock_repository():
    """Mock repository for testing without real DB connection."""
    return AsyncMock(spec=ProdutoRepository)


@pytest.fixture
async def client(mock_repository):
    """Async test client with the repository replaced by a mock."""
    app.dependency_overrides[get_produto_repository] = lambda: mock_repository

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
