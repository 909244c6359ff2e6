from typing import ClassVar, Dict

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ShippingForm(BaseModel):
    """Delivery details collected at checkout (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=9)
    address: str = Field(..., min_length=5)
    city: str = Field(..., min_length=2)
    zip_code: str = Field(..., min_length=4)

    messages: ClassVar[Dict[str, str]] = {
        "firstName": "First name must be at least 2 characters",
        "lastName": "Last name must be at least 2 characters",
        "email": "Invalid email address",
        "phone": "Invalid phone number",
        "address": "Address must be at least 5 characters",
        "city": "City must be at least 2 characters",
        "zipCode": "Zip code must be at least 4 characters",
    }
