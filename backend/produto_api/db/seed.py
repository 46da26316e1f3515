import asyncio
import logging

from produto_api.db.database import Database

logger = logging.getLogger(__name__)

# Sample products: (descricao, rating)
PRODUTOS_DATA = [
    ("Cafe Torrado 500g", 5),
    ("Azeite Extra Virgem", 4),
    ("Arroz Agulha 1kg", 3),
    ("Queijo da Serra", 5),
    ("Bolachas Maria", 2),
]


async def seed_database(db: Database | None = None) -> int:
    """Create the produto table and insert the sample rows if it is empty.

    Returns the number of rows inserted.
    """
    db = db or Database()
    await db.create_schema()

    existing = await db.execute_query("SELECT id FROM produto LIMIT 1")
    if existing:
        logger.info("Database already seeded")
        return 0

    for descricao, rating in PRODUTOS_DATA:
        await db.execute(
            "INSERT INTO produto (descricao, rating) VALUES (:descricao, :rating)",
            {"descricao": descricao, "rating": rating},
        )

    logger.info(f"Database seeded with {len(PRODUTOS_DATA)} products")
    return len(PRODUTOS_DATA)


async def main():
    db = Database()
    try:
        await seed_database(db)
    finally:
        await db.disconnect()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
