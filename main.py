from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import APP_NAME, APP_VERSION, db_config
from app.database import init_db, check_database_connection
from app.routes import commission, report
from app.utils.logger import app_logger
from app.utils.responses import error_response


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_logger.info("Starting application lifespan")
    if db_config.get("auto_create_tables"):
        try:
            await init_db()
        except Exception as e:
            # 表创建失败不阻止启动, 计算时会返回数据库错误
            app_logger.error(f"Database initialization failed: {e}")

    yield

    app_logger.info("Shutting down application")


app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)
# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(commission.router, prefix="/commission")
app.include_router(report.router, prefix="/report")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()
    )
    app_logger.warning(f"Invalid request to {request.url.path}: {errors}")
    return error_response(400, f"Invalid request: {errors}")


@app.get("/health")
async def health_check():
    """健康检查端点"""
    database_ok = await check_database_connection()
    return {
        "status": "healthy" if database_ok else "unhealthy",
        "database": "connected" if database_ok else "unavailable",
        "timestamp": datetime.now().isoformat()
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8002, log_level="info")
