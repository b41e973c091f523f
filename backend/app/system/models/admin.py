"""
管理员 ORM 模型
"""
from datetime import datetime, UTC

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from app.database import Base


class SysAdmin(Base):
    """后台管理员"""
    __tablename__ = "sys_admin"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True, comment="登录名")
    password_hash = Column(String(128), nullable=False)
    nickname = Column(String(50), default="", comment="昵称")
    status = Column(Integer, default=1, nullable=False, comment="1=启用 0=停用")
    remark = Column(String(500), default="")
    login_ip = Column(String(64), nullable=True, comment="最后登录 IP")
    login_time = Column(DateTime, nullable=True, comment="最后登录时间")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    admin_roles = relationship("SysAdminRole", back_populates="admin", cascade="all, delete-orphan")

    @property
    def role_ids(self):
        return [link.role_id for link in self.admin_roles]

    def __repr__(self):
        return f"<SysAdmin {self.username}>"
