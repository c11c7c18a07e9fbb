"""SQLModel table exports."""

from .finance import FinanceTransaction
from .goal import Goal
from .habit import Habit, HabitEntry
from .session import TimeSession
from .task import DailyTask
from .user import User

__all__ = [
    "DailyTask",
    "FinanceTransaction",
    "Goal",
    "Habit",
    "HabitEntry",
    "TimeSession",
    "User",
]
