from sqlalchemy import Column, Integer, String
from produto_api.db.database import Base


class Produto(Base):
    __tablename__ = "produto"

    id = Column(Integer, primary_key=True, autoincrement=True)
    descricao = Column(String(255), nullable=False, unique=True)
    # 1..5, checked by the request schema rather than the table
    rating = Column(Integer, nullable=False)
