from fastapi import APIRouter

from produto_api.schemas.produto import MessageResponse

router = APIRouter(tags=["health"])


@router.get("/", response_model=MessageResponse)
async def health():
    """Health check endpoint."""
    return {"message": "Produtos API is running!"}
