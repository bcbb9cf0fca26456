"""
AutoQuiz - auto financing lead capture service.
"""
__version__ = "1.0.0"
