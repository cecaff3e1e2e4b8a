from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from models.enums import Priority


# Records returned by the repository
class UserAccount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: str | None = None
    created_at: datetime
    last_login: datetime | None = None


class TaskItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = Field(default=None, description="Assigned by storage on first save")
    user_id: int
    title: str
    description: str | None = None
    priority: Priority = Field(default=Priority.MEDIUM)
    deadline: date | None = None
    completed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


# Request/Response Models
class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class RegisterRequest(BaseModel):
    email: str = ""
    display_name: str = ""
    password: str = ""
    confirm_password: str = ""


class TaskRequest(BaseModel):
    """Fields collected by the add/edit task form."""

    title: str = ""
    description: str | None = None
    priority: Priority | None = Field(default=None, description="Falls back to the user's default priority")
    deadline: date | None = None
    completed: bool | None = Field(default=None, description="Only honoured when editing")


class TaskStats(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    high_priority_pending: int = 0
    overdue: int = 0


class TaskListResponse(BaseModel):
    tasks: list[TaskItem]
    stats: TaskStats


class SettingsRequest(BaseModel):
    default_priority: Priority


class SettingsResponse(BaseModel):
    default_priority: Priority
