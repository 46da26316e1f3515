import uvicorn

from produto_api.config import Config

if __name__ == "__main__":
    uvicorn.run("produto_api.main:app", host=Config.HOST, port=Config.PORT)
