"""
Use Cases package - Business logic layer.

Modules:
- base: Base use case abstract class
- course_generation_use_case: Job lifecycle around a course generation run
"""

from .base import UseCase
from .course_generation_use_case import CourseGenerationUseCase, course_summary

__all__ = [
    "UseCase",
    "CourseGenerationUseCase",
    "course_summary",
]
