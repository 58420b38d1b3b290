from app.normalization.models import NormalizationResult, NormalizedUpdate
from app.normalization.normalizer import normalize_date, normalize_extracted_fine

__all__ = ["NormalizationResult", "NormalizedUpdate", "normalize_date", "normalize_extracted_fine"]
