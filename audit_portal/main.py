import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from audit_portal.config import settings
from audit_portal.db.database import check_database_connection, create_all_tables
from audit_portal.repositories.sqlalchemy_repository import SqlAlchemyUnitOfWork
from audit_portal.service.auth_service import AuthService
from audit_portal.service.errors import ServiceError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# 모든 HTTP 요청 로깅 미들웨어
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "unknown"

        start_time = time.time()

        try:
            response = await call_next(request)
            elapsed = time.time() - start_time
            logger.info(f"{client} {method} {path} → {response.status_code} ({elapsed:.3f}초)")
            return response
        except Exception as e:
            elapsed = time.time() - start_time
            logger.error(f"{client} {method} {path} 오류: {str(e)[:100]} ({elapsed:.3f}초)")
            raise


def error_body(detail: str, status_code: int, kind: str) -> dict:
    return {"detail": detail, "status_code": status_code, "error": kind}


def init_admin_user():
    """INITIAL_ADMIN_PASSWORD가 설정된 경우 최초 관리자 계정 생성"""
    if not settings.INITIAL_ADMIN_PASSWORD:
        return
    AuthService(SqlAlchemyUnitOfWork()).create_initial_admin(
        user_id=settings.INITIAL_ADMIN_USER_ID,
        name=settings.INITIAL_ADMIN_NAME,
        email=settings.INITIAL_ADMIN_EMAIL,
        password=settings.INITIAL_ADMIN_PASSWORD,
    )


# FastAPI 앱 생성
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="내부 감사 조직 사용자 디렉터리 / 인증 / 도구 권한 API",
    version=settings.VERSION,
)

# 요청 로깅 미들웨어 추가 (CORS 전에)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.status_code, exc.kind),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Буруу хүсэлт") if errors else "Буруу хүсэлт"
    # pydantic이 붙이는 "Value error, " 접두어 제거
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return JSONResponse(status_code=400, content=error_body(message, 400, "validation_error"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"처리되지 않은 오류: {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_body("Серверийн дотоод алдаа", 500, "internal_error"),
    )


# 애플리케이션 시작 시 테이블 생성
@app.on_event("startup")
def startup_event():
    """애플리케이션 시작 시 실행"""
    logger.info(f"{settings.PROJECT_NAME} 시작...")

    if not check_database_connection():
        logger.error("데이터베이스 연결 실패 - 테이블을 생성할 수 없습니다")
        return

    create_all_tables()
    init_admin_user()


# 헬스체크 엔드포인트
@app.get("/health")
def health_check():
    database_ok = check_database_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "disconnected",
    }


@app.get("/")
def root():
    """API 루트 엔드포인트"""
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health",
    }


# API 라우트
from audit_portal.api import auth, departments, fitness, users  # noqa: E402

app.include_router(auth.router)
app.include_router(departments.router)
app.include_router(users.router)
app.include_router(fitness.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8080,
    )
