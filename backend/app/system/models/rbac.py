"""
RBAC ORM 模型
- SysRole: 角色
- SysRoleMenu: 角色-菜单关联（菜单即权限）
- SysAdminRole: 管理员-角色关联
"""
from datetime import datetime, UTC

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class SysRole(Base):
    __tablename__ = "sys_role"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_name = Column(String(50), unique=True, nullable=False, comment="角色名称")
    sort = Column(Integer, default=0, nullable=False)
    status = Column(Integer, default=1, nullable=False, comment="1=启用 0=停用")
    remark = Column(String(500), default="")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    role_menus = relationship("SysRoleMenu", back_populates="role", cascade="all, delete-orphan")

    @property
    def menu_ids(self):
        return sorted(link.menu_id for link in self.role_menus)

    def __repr__(self):
        return f"<SysRole {self.role_name}>"


class SysRoleMenu(Base):
    __tablename__ = "sys_role_menu"
    __table_args__ = (UniqueConstraint("role_id", "menu_id", name="uq_role_menu"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("sys_role.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_id = Column(Integer, ForeignKey("sys_menu.id", ondelete="CASCADE"), nullable=False, index=True)

    role = relationship("SysRole", back_populates="role_menus")


class SysAdminRole(Base):
    __tablename__ = "sys_admin_role"
    __table_args__ = (UniqueConstraint("admin_id", "role_id", name="uq_admin_role"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_id = Column(Integer, ForeignKey("sys_admin.id", ondelete="CASCADE"), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("sys_role.id", ondelete="CASCADE"), nullable=False, index=True)

    admin = relationship("SysAdmin", back_populates="admin_roles")
    role = relationship("SysRole")
