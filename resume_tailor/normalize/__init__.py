from .normalize_jd import normalize_jd
from .normalize_resume import normalize_resume

__all__ = ["normalize_jd", "normalize_resume"]
