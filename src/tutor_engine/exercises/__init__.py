"""Exercise list, session persistence and parallel verification."""

from .checker import Checker, SubprocessChecker
from .models import Exercise
from .progress import CheckProgress, NullProgressView, ProgressView, RichProgressView
from .scheduler import CheckReport, Outcome, VerificationScheduler, WorkCursor
from .session import ExerciseResetter, ExerciseSession, ExercisesProgress
from .state_file import StateFileStatus, StateStore

__all__ = [
    "Checker",
    "SubprocessChecker",
    "Exercise",
    "CheckProgress",
    "NullProgressView",
    "ProgressView",
    "RichProgressView",
    "CheckReport",
    "Outcome",
    "VerificationScheduler",
    "WorkCursor",
    "ExerciseResetter",
    "ExerciseSession",
    "ExercisesProgress",
    "StateFileStatus",
    "StateStore",
]
