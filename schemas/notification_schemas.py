from enum import Enum
from pydantic import BaseModel


class Severity(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    title: str
    description: str
    severity: Severity = Severity.DEFAULT


__all__ = ["Severity", "Notification"]
