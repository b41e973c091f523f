"""
菜单管理 ORM 模型

parent_id = 0 表示根节点；父子关系只通过 id 引用保存，树在内存中构建。
"""
from datetime import datetime, UTC

from sqlalchemy import Column, Integer, String, DateTime

from app.database import Base

ROOT_PARENT_ID = 0


class SysMenu(Base):
    __tablename__ = "sys_menu"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, default=ROOT_PARENT_ID, nullable=False, index=True, comment="父菜单ID")
    menu_type = Column(String(1), default="M", nullable=False, comment="D=目录 M=菜单 B=按钮")
    menu_name = Column(String(50), nullable=False, comment="菜单名称")
    permission = Column(String(100), unique=True, nullable=True, comment="权限标识")
    path = Column(String(200), nullable=True, comment="前端路由路径")
    component = Column(String(200), nullable=True, comment="前端组件路径")
    icon = Column(String(50), nullable=True, comment="图标名称")
    sort = Column(Integer, default=0, nullable=False, comment="排序")
    visible = Column(Integer, default=1, nullable=False, comment="1=显示 0=隐藏")
    status = Column(Integer, default=1, nullable=False, comment="1=启用 0=停用")
    is_external = Column(Integer, default=0, nullable=False, comment="是否外链")
    is_cache = Column(Integer, default=0, nullable=False, comment="是否缓存")
    remark = Column(String(500), default="")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    def __repr__(self):
        return f"<SysMenu {self.id} {self.menu_name}>"
