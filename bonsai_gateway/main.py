from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bonsai_gateway.config import get_settings
from bonsai_gateway.middleware_logging import configure_logging, register_request_logging
from bonsai_gateway.error_handlers import register_error_handlers
from bonsai_gateway.routers.health import VERSION

from bonsai_gateway.routers import code, cua, emergency, health, mcp, memory, pipedream, research

API_PREFIX = "/api"


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Bons-AI Gateway", version=VERSION)
    register_request_logging(app)
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"success": True, "message": "Bons-AI gateway: vendor proxies and the MCP server registry."}

    app.include_router(health.router)
    for module in (code, cua, emergency, mcp, memory, pipedream, research):
        app.include_router(module.router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("bonsai_gateway.main:app", host="0.0.0.0", port=get_settings().PORT)
