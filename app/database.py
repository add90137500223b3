from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.exc import SQLAlchemyError

from app.config import db_config
from app.utils.logger import app_logger


def build_database_url(database: dict) -> str:
    """配置中给出完整url时直接使用，否则按MySQL参数拼接"""
    if database.get('url'):
        return database['url']
    return (f"mysql+aiomysql://{database['username']}:{database['password']}"
            f"@{database['host']}:{database['port']}/{database['name']}")


database_url = build_database_url(db_config)

if database_url.startswith("sqlite"):
    engine = create_async_engine(database_url, echo=False)
else:
    engine = create_async_engine(database_url, pool_size=10,
                                 max_overflow=20,
                                 pool_pre_ping=True,
                                 pool_recycle=3600,
                                 echo=False)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# 基类
Base = declarative_base()


async def get_db():
    """获取数据库会话"""
    async_session = None
    try:
        async_session = SessionLocal()
        yield async_session
    except SQLAlchemyError as e:
        app_logger.error(f"Database operation error: {e}")
        raise
    finally:
        if async_session is not None:
            try:
                await async_session.close()
            except Exception as e:
                app_logger.error(f"Error closing database session: {e}")


async def init_db(bind=None):
    """
    初始化数据库并创建所有表
    """
    # 导入所有模型后创建所有表
    import app.models.commission  # noqa: F401
    import app.models.sales  # noqa: F401
    import app.models.target  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app_logger.info("Database tables created successfully")


async def check_database_connection() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        app_logger.error(f"Database connection failed: {e}")
        return False
