"""
Core Exceptions
Base exceptions for the application.
"""


class CourseGenerationError(Exception):
    """Base exception for all application errors."""
    pass


class PipelineError(CourseGenerationError):
    """Base exception for processing pipeline errors."""
    pass


class PersistenceError(PipelineError, RuntimeError):
    """Writing the finished course to the database failed. Always fatal."""
    pass
