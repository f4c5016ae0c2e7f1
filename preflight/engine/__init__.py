"""PreFlight engine: generation workflow and the public facade."""

from .facade import PreFlightEngine
from .graph import create_generation_graph
from .models import GenerationState

__all__ = ["GenerationState", "PreFlightEngine", "create_generation_graph"]
