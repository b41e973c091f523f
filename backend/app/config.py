"""
应用配置
从环境变量和 .env 读取配置
"""
from typing import List
from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "Admin Scaffold"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./admin.db"
    AUTO_DB_INIT: bool = True
    AUTO_DB_SEED: bool = True

    # JWT 配置
    JWT_SECRET_KEY: str = Field(
        default="admin-scaffold-dev-secret-change-in-production",
        min_length=32,
    )
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # 超级管理员 ID：跳过权限检查，不可删除
    SUPER_ADMIN_ID: int = 1

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # 操作日志中请求参数 / 响应结果的最大存储长度
    AUDIT_RESULT_MAX_LENGTH: int = 2000

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# 全局设置实例
settings = Settings()
