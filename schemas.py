"""
Database Schemas for the product catalog

Each Pydantic model corresponds to one MongoDB collection and validates
its own documents. Collection names come from Settings.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(None, alias="_id")
    product_name: str = ""
    # strict: "300" is not an int and "yes" is not a bool in a JSON body
    price: int = Field(0, strict=True)
    currency: str = ""
    quantity: int = Field(0, strict=True)
    discount: Optional[int] = Field(None, strict=True)
    vendor: str = Field(..., min_length=1)
    accessories: Optional[List[str]] = None
    is_essential: bool = Field(False, strict=True)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_object_id(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, str):
            return str(value)
        return value

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_document(self) -> Dict[str, Any]:
        # _id is owned by the store and never part of a $set
        return self.model_dump(exclude={"id"}, exclude_none=True)


class UserCredentials(BaseModel):
    username: EmailStr
    password: str = Field(..., min_length=8, max_length=30)


class UserOut(BaseModel):
    username: str
