import argparse
import json
import uuid
from datetime import date, timedelta

import uvicorn

from database import Database
from models.enums import Priority
from services.repository import TaskRepository
from shared.config import AppConfig
from shared.errors import TaskManagerError
from shared.models import TaskItem

SMOKE_USER_DOMAIN = "example.com"


def smoke_user_email() -> str:
    """Fresh address per run so leftovers from an interrupted check never collide."""
    return f"smoke-test-{uuid.uuid4().hex[:12]}@{SMOKE_USER_DOMAIN}"


def serve(args: argparse.Namespace) -> None:
    print(f"[BOOTLOADER] Starting task manager on {args.host}:{args.port} ...")
    uvicorn.run(
        "services.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def show_config(args: argparse.Namespace) -> None:
    print(json.dumps(AppConfig().describe(), indent=2))


def check_db(args: argparse.Namespace) -> int:
    """Connect, create the schema, and run a register/save/list/delete round trip."""
    config = AppConfig()
    print("=== Database Connection Test ===")
    try:
        print(json.dumps(config.describe(), indent=2))
        database = Database(config)
    except TaskManagerError as e:
        print(f"[FAILED] Database setup failed: {e}")
        return 1

    repository = TaskRepository(database)
    try:
        print("[OK] Database connection successful")
        user = repository.register(smoke_user_email(), "password123", "Smoke Test")
        print(f"[OK] Created user with ID: {user.id}")

        task = repository.save_task(
            TaskItem(
                user_id=user.id,
                title="Test Task",
                description="This is a test task",
                priority=Priority.HIGH,
                deadline=date.today() + timedelta(days=7),
            )
        )
        print(f"[OK] Task created with ID: {task.id}")
        print(f"[OK] Retrieved {len(repository.get_tasks_for_user(user.id))} tasks for user")

        repository.delete_user(user.id)
        print("[OK] Test data cleaned up")
    except TaskManagerError as e:
        print(f"[FAILED] Database operation failed: {e}")
        return 1
    finally:
        database.dispose()

    print("=== Test Complete ===")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Bootloader for the task manager backend.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload (dev mode)")
    serve_parser.set_defaults(handler=serve)

    subparsers.add_parser("check-db", help="Verify the database setup").set_defaults(handler=check_db)
    subparsers.add_parser("show-config", help="Print the effective configuration").set_defaults(
        handler=show_config
    )

    args = parser.parse_args()
    return args.handler(args) or 0


if __name__ == "__main__":
    raise SystemExit(main())
