# Models module
from .job import GenerationJobSpec, JobMetrics, JobStatusEnum

__all__ = ["GenerationJobSpec", "JobMetrics", "JobStatusEnum"]
