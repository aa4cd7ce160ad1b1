from typing import Optional

from sqlmodel import Session, select

from nyonjo.core.clock import utcnow
from nyonjo.models.site_setting import SITE_LOGO_KEY, SiteSetting


class SiteSettingService:
    def __init__(self, session: Session):
        self.session = session

    def get_value(self, key: str) -> Optional[str]:
        setting = self.session.exec(select(SiteSetting).where(SiteSetting.setting_key == key)).first()
        return setting.setting_value if setting else None

    def set_value(self, key: str, value: str) -> SiteSetting:
        setting = self.session.exec(select(SiteSetting).where(SiteSetting.setting_key == key)).first()
        if setting:
            setting.setting_value = value
            setting.updated_at = utcnow()
        else:
            setting = SiteSetting(setting_key=key, setting_value=value)
        self.session.add(setting)
        self.session.commit()
        self.session.refresh(setting)
        return setting

    def get_logo_url(self) -> str:
        return self.get_value(SITE_LOGO_KEY) or ""

    def set_logo_url(self, url: str) -> SiteSetting:
        return self.set_value(SITE_LOGO_KEY, url)
