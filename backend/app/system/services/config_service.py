"""
系统配置 Service - 配置 CRUD + 内存缓存 + 类型校验
"""
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.exceptions import BusinessError, ConflictError, NotFoundError, ValidationError
from app.responses import Page
from app.system.models import SysConfig
from app.system.schemas import ConfigCreate, ConfigQuery, ConfigResponse, ConfigUpdate, ConfigValueUpdate

logger = logging.getLogger(__name__)

# 启用配置的类型化值缓存（启动时预加载，写操作后刷新）
_config_cache: Dict[str, Any] = {}
_cache_loaded = False


class ConfigService:
    def __init__(self, db: Session):
        self.db = db

    # ---- Cache ----

    def load_cache(self) -> int:
        """预加载所有启用的配置"""
        global _config_cache, _cache_loaded
        configs = self.db.query(SysConfig).filter(SysConfig.status == 1).all()
        _config_cache = {c.config_key: self._cast_value(c.config_value, c.config_type) for c in configs}
        _cache_loaded = True
        logger.info("配置缓存已加载: %s 项", len(_config_cache))
        return len(_config_cache)

    def get_value(self, key: str, default: Any = None) -> Any:
        """获取类型化配置值"""
        if not _cache_loaded:
            self.load_cache()
        return _config_cache.get(key, default)

    def _refresh_cache(self, config: SysConfig, old_key: Optional[str] = None) -> None:
        if old_key and old_key != config.config_key:
            _config_cache.pop(old_key, None)
        if config.status == 1:
            _config_cache[config.config_key] = self._cast_value(config.config_value, config.config_type)
        else:
            _config_cache.pop(config.config_key, None)

    @staticmethod
    def reset_cache():
        """Reset the config cache (for testing)"""
        global _config_cache, _cache_loaded
        _config_cache = {}
        _cache_loaded = False

    # ---- Read operations ----

    def list_configs(self, query: ConfigQuery) -> Page:
        q = self.db.query(SysConfig)
        if query.config_key:
            q = q.filter(SysConfig.config_key.contains(query.config_key))
        if query.config_name:
            q = q.filter(SysConfig.config_name.contains(query.config_name))
        if query.config_group:
            q = q.filter(SysConfig.config_group == query.config_group)
        if query.status is not None:
            q = q.filter(SysConfig.status == query.status)

        total = q.count()
        rows = (
            q.order_by(SysConfig.config_group, SysConfig.config_key)
            .offset(query.offset)
            .limit(query.page_size)
            .all()
        )
        return Page[ConfigResponse].build([ConfigResponse.model_validate(r) for r in rows], total, query)

    def get_config(self, config_id: int) -> SysConfig:
        config = self.db.query(SysConfig).filter(SysConfig.id == config_id).first()
        if not config:
            raise NotFoundError("配置不存在")
        return config

    def get_by_key(self, key: str) -> Optional[SysConfig]:
        return self.db.query(SysConfig).filter(SysConfig.config_key == key).first()

    # ---- Write operations ----

    def create_config(self, data: ConfigCreate) -> SysConfig:
        if self.get_by_key(data.config_key):
            raise ConflictError("配置键已存在")
        self._validate_value(data.config_value, data.config_type)

        config = SysConfig(**data.model_dump())
        self.db.add(config)
        self.db.flush()
        self._refresh_cache(config)
        logger.info("创建配置: %s", config.config_key)
        return config

    def update_config(self, config_id: int, data: ConfigUpdate) -> SysConfig:
        config = self.get_config(config_id)
        old_key = config.config_key
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        new_key = updates.get("config_key")
        if new_key and new_key != old_key:
            if config.is_system:
                raise BusinessError("系统内置配置不能修改配置键")
            if self.get_by_key(new_key):
                raise ConflictError("配置键已存在")

        self._validate_value(
            updates.get("config_value", config.config_value),
            updates.get("config_type", config.config_type),
        )
        for key, value in updates.items():
            setattr(config, key, value)
        self.db.flush()
        self._refresh_cache(config, old_key=old_key)
        logger.info("更新配置: %s", config.config_key)
        return config

    def update_value(self, config_id: int, data: ConfigValueUpdate) -> SysConfig:
        """仅更新配置值（及可选类型）"""
        config = self.get_config(config_id)
        config_type = data.config_type or config.config_type
        self._validate_value(data.config_value, config_type)

        config.config_value = data.config_value
        config.config_type = config_type
        self.db.flush()
        self._refresh_cache(config)
        logger.info("更新配置值: %s", config.config_key)
        return config

    def delete_config(self, config_id: int) -> None:
        config = self.get_config(config_id)
        if config.is_system:
            raise BusinessError(f"系统内置配置 '{config.config_key}' 不可删除")

        _config_cache.pop(config.config_key, None)
        self.db.delete(config)
        self.db.flush()
        logger.info("删除配置: %s", config.config_key)

    # ---- Helpers ----

    @staticmethod
    def _validate_value(value: Optional[str], config_type: str) -> None:
        value = value or ""
        if config_type == "number":
            try:
                float(value)
            except ValueError:
                raise ValidationError("配置值必须是数字")
        elif config_type == "boolean":
            if value.lower() not in ("true", "false", "1", "0"):
                raise ValidationError("配置值必须是 true 或 false")
        elif config_type == "json":
            try:
                json.loads(value)
            except json.JSONDecodeError:
                raise ValidationError("配置值必须是合法的 JSON")

    @staticmethod
    def _cast_value(value: Optional[str], config_type: str) -> Any:
        """Cast string value to its declared type"""
        value = value or ""
        if config_type == "number":
            try:
                return int(value) if '.' not in value else float(value)
            except ValueError:
                return value
        elif config_type == "boolean":
            return value.lower() in ("true", "1")
        elif config_type == "json":
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value
