"""
数据库配置 - SQLAlchemy 会话与事务
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from app.config import settings

logger = logging.getLogger(__name__)

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """依赖注入：获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """在一个事务内执行：成功提交，异常回滚后继续抛出"""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db():
    """初始化数据库表"""
    from app.system import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

    if _is_sqlite and ":memory:" not in settings.DATABASE_URL and settings.DATABASE_URL != "sqlite://":
        # 启用 WAL 模式以提高并发性能
        with engine.connect() as conn:
            conn.execute(text("PRAGMA journal_mode=WAL"))
            conn.execute(text("PRAGMA synchronous=NORMAL"))
            conn.commit()
    logger.info("数据库表已初始化: %s", engine.url.render_as_string(hide_password=True))
