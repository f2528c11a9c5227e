"""
Core shared types and utilities for the exam analysis service.

This module provides the foundational components used by both the variant
generator and the analysis engine, so that the two engines agree on how
questions, options and answers are represented and compared.
"""

from exam_analysis.core.utils import normalize, parse_options
