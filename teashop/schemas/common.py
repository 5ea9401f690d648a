# teashop/schemas/common.py
from sqlmodel import SQLModel


class MessageResponse(SQLModel):
    """
    Generic acknowledgement returned by mutations without a payload.
    """

    success: bool = True
    message: str
