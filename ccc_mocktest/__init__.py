"""
CCC Mock Test - question bank, submission scoring and review API
"""

__version__ = "1.0.0"
__description__ = "Mock test backend with bilingual question bank and scoring"
