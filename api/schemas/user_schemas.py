from pydantic import BaseModel
from typing import Optional

class User(BaseModel):
    """Authenticated caller, resolved from the bearer token."""
    id: str
    username: str
    email: str
    full_name: Optional[str] = None
