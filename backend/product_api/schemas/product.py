from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=120, description="Description should be at least 120 characters long")
    price: float
    image: str = Field(..., min_length=1, max_length=1024)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    pass


class ProductOut(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    productId: str = Field(validation_alias=AliasChoices("productId", "product_id"))
    user: int = Field(validation_alias=AliasChoices("user_id", "user"))
    createdAt: datetime = Field(validation_alias=AliasChoices("createdAt", "created_at"))
    updatedAt: datetime = Field(validation_alias=AliasChoices("updatedAt", "updated_at"))
