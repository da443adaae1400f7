from pydantic import BaseModel
from datetime import datetime

class NotificationResponse(BaseModel):
    id: int
    user_id: int
    message: str
    is_checked: bool
    created_at: datetime

    class Config:
        from_attributes = True
