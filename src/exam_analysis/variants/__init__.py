"""
Deterministic exam variant generation.
"""

from exam_analysis.variants.config import ExamVariationConfig
from exam_analysis.variants.generator import (
    generate_exam_variations,
    recreate_variant,
)
