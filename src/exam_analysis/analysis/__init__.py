"""
Psychometric item analysis of graded exam variants.
"""

from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.engine import (
    analyze_by_variant,
    analyze_exam,
    compute_exam_analysis,
)
