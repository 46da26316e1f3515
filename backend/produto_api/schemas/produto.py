from pydantic import BaseModel, ConfigDict, Field, field_validator

# Length of the produto.descricao column
DESCRICAO_MAX_LENGTH = 255


def _reject_bool(value):
    # JSON true/false would otherwise be coerced to 1/0
    if isinstance(value, bool):
        raise ValueError("rating must be an integer")
    return value


class ProdutoCreate(BaseModel):
    descricao: str = Field(..., min_length=1, max_length=DESCRICAO_MAX_LENGTH, examples=["Produto Exemplo"])
    rating: int = Field(..., ge=1, le=5, examples=[4])

    @field_validator("rating", mode="before")
    @classmethod
    def rating_not_bool(cls, value):
        return _reject_bool(value)


class ProdutoUpdate(BaseModel):
    """Full replacement of a product's fields; no range checks are applied."""
    descricao: str = Field(..., max_length=DESCRICAO_MAX_LENGTH, examples=["Produto Exemplo Atualizado"])
    rating: int = Field(..., examples=[5])

    @field_validator("rating", mode="before")
    @classmethod
    def rating_not_bool(cls, value):
        return _reject_bool(value)


class Produto(BaseModel):
    id: int
    descricao: str
    rating: int
    model_config = ConfigDict(from_attributes=True)


class ProdutoCreated(BaseModel):
    message: str
    produto: Produto


class ValidationDetail(BaseModel):
    msg: str
    param: str
    location: str


class ErrorResponse(BaseModel):
    error: str
    details: str | list[ValidationDetail] | None = None


class MessageResponse(BaseModel):
    message: str
