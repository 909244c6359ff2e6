from pydantic import BaseModel


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1


class UpdateCartRequest(BaseModel):
    item_id: str
    quantity: int


class RemoveFromCartRequest(BaseModel):
    item_id: str
