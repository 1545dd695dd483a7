from sqlmodel import SQLModel


class CartAddRequest(SQLModel):
    product_id: int
    quantity: int = 1


class RestockRequest(SQLModel):
    quantity: int
