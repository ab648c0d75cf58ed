"""Sessions module - session model, storage, tracking and progress inference."""

from .inference import ProgressInferencer
from .models import Session
from .store import SessionRepository, SessionStore
from .tracker import SessionTracker, best_effort

__all__ = [
	"Session",
	"SessionRepository",
	"SessionStore",
	"SessionTracker",
	"ProgressInferencer",
	"best_effort",
]
