"""
系统配置 ORM 模型
- SysConfig: 统一 key-value 配置，支持分组和类型
"""
from datetime import datetime, UTC

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text

from app.database import Base


class SysConfig(Base):
    """系统配置"""
    __tablename__ = "sys_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    config_key = Column(String(100), unique=True, nullable=False, index=True)
    config_value = Column(Text, default="")
    config_type = Column(String(20), default="string", nullable=False)  # string, number, boolean, json
    config_group = Column(String(50), default="general", nullable=False, index=True)
    config_name = Column(String(100), nullable=False)
    remark = Column(String(500), default="")
    is_system = Column(Boolean, default=False)  # built-in, cannot delete
    status = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))
