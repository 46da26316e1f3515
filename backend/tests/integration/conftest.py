import pytest
from httpx import AsyncClient, ASGITransport

from produto_api.db.database import Database
from produto_api.main import app


@pytest.fixture
async def db(tmp_path):
    """Real database: a fresh SQLite file per test, with foreign keys enforced."""
    database = Database(url=f"sqlite:///{tmp_path / 'produtos.db'}")
    await database.connect()
    await database.create_schema()
    # A table referencing produto, to exercise foreign key violations
    await database.execute(
        "CREATE TABLE pedido_item ("
        " id INTEGER PRIMARY KEY,"
        " produto_id INTEGER NOT NULL REFERENCES produto(id))"
    )
    yield database
    await database.disconnect()


@pytest.fixture
async def db_client(db):
    """Async test client wired to the real database."""
    app.state.db = db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac
    del app.state.db
