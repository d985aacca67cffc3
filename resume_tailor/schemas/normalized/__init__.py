from .jd import JobDescription
from .resume import ExperienceEntry, ResumeProfile

__all__ = [
    "ExperienceEntry",
    "JobDescription",
    "ResumeProfile",
]
