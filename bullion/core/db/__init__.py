from bullion.core.db.base import Base, BaseModel, AuditMixin

__all__ = ["Base", "BaseModel", "AuditMixin"]
