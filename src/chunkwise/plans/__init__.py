"""Plans module - plan model, document codec and storage."""

from .accessor import ChunkState, PlanAccessor
from .codec import format_plan, parse, parse_duration
from .models import Chunk, Plan, Status
from .repository import PlanRepository
from .service import PlanService

__all__ = [
	"Plan",
	"Chunk",
	"Status",
	"ChunkState",
	"PlanAccessor",
	"parse",
	"format_plan",
	"parse_duration",
	"PlanRepository",
	"PlanService",
]
