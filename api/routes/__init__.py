# Routes module
from .jobs import router as jobs_router
from .profiles import router as profiles_router
from .analysis import router as analysis_router

__all__ = ["jobs_router", "profiles_router", "analysis_router"]
