from typing import Optional, List
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import JSON, Text
from datetime import datetime
from nyonjo.core.clock import utcnow

class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Basic Info
    name: str = Field(index=True)
    category: str = Field(index=True)
    short_description: str = ""
    description: str = Field(default="", sa_column=Column(Text))

    # Detailed Product Info
    benefits: List[str] = Field(default=[], sa_column=Column(JSON))
    usage_instructions: str = ""

    # Images (public storage URLs)
    images: List[str] = Field(default=[], sa_column=Column(JSON))

    # Pricing
    price: float

    # Status
    in_stock: bool = Field(default=True, index=True)
    featured: bool = Field(default=False, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
