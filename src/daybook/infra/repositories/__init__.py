"""SQLModel repositories."""

from .finance import SQLModelFinanceRepository
from .goal import SQLModelGoalRepository
from .habit import SQLModelHabitRepository
from .session import SQLModelSessionRepository
from .task import SQLModelTaskRepository
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelFinanceRepository",
    "SQLModelGoalRepository",
    "SQLModelHabitRepository",
    "SQLModelSessionRepository",
    "SQLModelTaskRepository",
    "SQLModelUserRepository",
]
