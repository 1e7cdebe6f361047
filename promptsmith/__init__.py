"""
promptsmith - prompt vagueness scoring and enhancement orchestration.
"""

__version__ = "1.0.0"
