"""
操作日志 ORM 模型
"""
from datetime import datetime, UTC

from sqlalchemy import Column, Integer, String, DateTime, Text

from app.database import Base


class SysOperationLog(Base):
    """一次写操作的审计记录（谁、做了什么、何时、结果）"""
    __tablename__ = "sys_operation_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(Integer, nullable=True, index=True)
    admin_name = Column(String(50), nullable=True)
    module = Column(String(50), nullable=False, index=True)
    operation = Column(String(50), nullable=False)
    description = Column(String(200), nullable=True)
    method = Column(String(100), nullable=True, comment="处理函数")
    request_method = Column(String(10), nullable=True)
    request_url = Column(String(500), nullable=True)
    request_params = Column(Text, nullable=True)
    response_result = Column(Text, nullable=True)
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    execution_time = Column(Integer, default=0, comment="耗时(ms)")
    status = Column(Integer, default=1, nullable=False, comment="1=成功 0=失败")
    error_msg = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), index=True)
