from typing import Optional
from datetime import datetime
from nyonjo.core.clock import utcnow
from sqlmodel import Field, SQLModel

SITE_LOGO_KEY = "site_logo"

class SiteSetting(SQLModel, table=True):
    __tablename__ = "site_settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    setting_key: str = Field(unique=True, index=True)
    setting_value: str = ""

    updated_at: datetime = Field(default_factory=utcnow)
