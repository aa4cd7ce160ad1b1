# Import all models to register them with SQLModel
from nyonjo.models.product import Product
from nyonjo.models.blog import BlogPost, BlogComment, BlogReaction, MediaType
from nyonjo.models.sisterhood import SisterhoodPost, SisterhoodComment
from nyonjo.models.message import Message, MessageStatus, ContactPreference
from nyonjo.models.site_setting import SiteSetting, SITE_LOGO_KEY

__all__ = [
    "Product",
    "BlogPost",
    "BlogComment",
    "BlogReaction",
    "MediaType",
    "SisterhoodPost",
    "SisterhoodComment",
    "Message",
    "MessageStatus",
    "ContactPreference",
    "SiteSetting",
    "SITE_LOGO_KEY",
]
