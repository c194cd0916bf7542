import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .shipper import LogShipper


def get_log_shipper(request: Request) -> LogShipper:
    return request.app.state.log_shipper


def create_app(shipper: Optional[LogShipper] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.log_shipper = shipper or LogShipper.from_settings(Settings.from_env())
        await app.state.log_shipper.start()
        try:
            yield
        finally:
            await app.state.log_shipper.stop()

    # ========= App / Middleware =========
    app = FastAPI(lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def ship_request_logs(request: Request, call_next):
        logs = get_log_shipper(request)
        start = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            logs.log_error("request failed", request, e, {"method": request.method})
            raise
        logs.log_info("request completed", request, {
            "method": request.method,
            "status": response.status_code,
            "duration_ms": round((time.time() - start) * 1000, 2),
        })
        return response

    # ========= Routes =========
    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
