from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SessionIdentity(BaseModel):
    # supplied by the auth collaborator, read only for the cart
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    email: EmailStr
    room_number: str = Field(..., alias="roomNumber")
    hall: str
    token: str = Field(..., alias="bearerToken", min_length=1)


__all__ = ["SessionIdentity"]
