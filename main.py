import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config import Settings
from database import connect
from errors import register_exception_handlers
from middleware import CORRELATION_ID_HEADER, add_request_middleware
from repositories import ProductRepository, UserRepository
from routes.products import router as products_router
from routes.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.users.ensure_indexes()
    logger.info("Listening on %s:%s", app.state.settings.host, app.state.settings.port)
    yield


def create_app(settings: Optional[Settings] = None, client: Optional[MongoClient] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper())

    client = client or connect(settings)
    db = client[settings.db_name]

    app = FastAPI(title="Product Catalog API", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.products = ProductRepository(db[settings.product_collection])
    app.state.users = UserRepository(db[settings.users_collection])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-auth-token", CORRELATION_ID_HEADER],
    )
    add_request_middleware(app)
    register_exception_handlers(app)

    # ----------------------- Health -----------------------
    @app.get("/")
    def root():
        return {"message": "Product catalog API running"}

    @app.get("/health")
    def health(request: Request):
        response = {
            "backend": "Running",
            "database": "Not Available",
            "database_name": settings.db_name,
            "collections": [],
        }
        try:
            response["collections"] = request.app.state.db.list_collection_names()[:10]
            response["database"] = "Connected"
        except PyMongoError as e:
            response["database"] = f"Error: {str(e)[:80]}"
        return response

    app.include_router(products_router)
    app.include_router(users_router)
    return app


if __name__ == "__main__":
    # or: uvicorn --factory main:create_app
    import uvicorn
    app = create_app()
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
