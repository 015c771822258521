import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from audit_portal.config.settings import DATABASE_URL

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite는 외래키 검사가 기본으로 꺼져 있음"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> Engine:
    """
    데이터베이스 엔진 생성

    SQLite(테스트/로컬)와 서버 DB(PostgreSQL)의 연결 옵션이 다름
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # 메모리 DB는 커넥션 하나를 공유해야 테이블이 유지됨
        if url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(url, echo=False, **kwargs)
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_engine(
        url,
        echo=False,
        pool_size=10,  # 동시 연결 수
        max_overflow=5,  # 추가 연결 (제한적)
        pool_pre_ping=True,  # 사용 전 연결 테스트
        pool_recycle=1800,  # 30분마다 연결 재활성화
    )


engine = build_engine(DATABASE_URL)

# 세션 설정
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# ORM Base 클래스
Base = declarative_base()


def create_all_tables():
    """모든 테이블 생성"""
    # 모델 import (메타데이터 등록)
    from audit_portal.models import user, department, fitness  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("테이블 생성 완료")


def check_database_connection() -> bool:
    """데이터베이스 연결 테스트"""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"데이터베이스 연결 실패: {e}")
        return False
