"""Form checks run before any repository call."""

from shared.errors import ValidationError
from shared.models import LoginRequest, RegisterRequest, TaskRequest

MIN_PASSWORD_LENGTH = 6


def validate_login(request: LoginRequest) -> LoginRequest:
    email = request.email.strip()
    if not email or not request.password:
        raise ValidationError("Please enter both email and password")
    return request.model_copy(update={"email": email})


def validate_registration(request: RegisterRequest) -> RegisterRequest:
    """Return a trimmed copy of the registration form or raise ``ValidationError``."""
    email = request.email.strip()
    display_name = request.display_name.strip()

    if not email or not display_name or not request.password:
        raise ValidationError("All fields are required")
    if request.password != request.confirm_password:
        raise ValidationError("Passwords do not match")
    if len(request.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return request.model_copy(update={"email": email, "display_name": display_name})


def validate_task(request: TaskRequest) -> TaskRequest:
    title = request.title.strip()
    if not title:
        raise ValidationError("Task title is required")
    description = request.description.strip() if request.description is not None else None
    return request.model_copy(update={"title": title, "description": description})
