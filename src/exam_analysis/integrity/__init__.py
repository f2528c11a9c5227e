"""
Integrity review: student and variant similarity, randomization quality.
"""
