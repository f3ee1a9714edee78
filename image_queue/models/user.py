from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON, func
from sqlalchemy.ext.mutable import MutableDict

from image_queue.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    # hashedPassword, workspaceCode, accountSetupComplete, setupDate, ...
    preferences = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)
    subscription_tier = Column(String, default="free", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    last_login = Column(DateTime, nullable=True)

    @property
    def hashed_password(self):
        return (self.preferences or {}).get("hashedPassword")

    @property
    def workspace_code(self):
        return (self.preferences or {}).get("workspaceCode")
