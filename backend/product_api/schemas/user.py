from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from product_api.services.users import BCRYPT_MAX_PASSWORD_BYTES


class CreateUserInput(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6, description="Password too short - should be 6 chars minimum")
    passwordConfirmation: str

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(f"Password too long - should be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "CreateUserInput":
        if self.password != self.passwordConfirmation:
            raise ValueError("Passwords do not match")
        return self


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    createdAt: datetime = Field(validation_alias=AliasChoices("createdAt", "created_at"))
    updatedAt: datetime = Field(validation_alias=AliasChoices("updatedAt", "updated_at"))
