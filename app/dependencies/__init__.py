from app.dependencies.auth import get_current_user
from app.dependencies.tasks import get_owned_task, get_task_list_params

__all__ = [
    "get_current_user",
    "get_owned_task",
    "get_task_list_params",
]
