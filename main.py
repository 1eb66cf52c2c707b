from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.database import init_db
from core.errors import register_exception_handlers
from core.logging import configure_logging
from core.settings import Settings, get_settings
from modules.auth.router import router as auth_router
from modules.products.router import router as products_router
from modules.purchases.router import router as purchases_router
from modules.raw_materials.router import router as raw_materials_router
from modules.recipes.router import router as recipes_router
from modules.reports.router import router as reports_router
from modules.transactions.router import router as transactions_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title=settings.app_name)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(raw_materials_router)
    app.include_router(recipes_router)
    app.include_router(purchases_router)
    app.include_router(transactions_router)
    app.include_router(reports_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


@app.on_event("startup")
def on_startup():
    init_db()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000)
