"""
Core Module - Cross-cutting concerns and shared infrastructure

Organization:
    - logging.py: Structured logging configuration and correlation ids
    - security.py: Filename / identifier sanitization
    - runtime.py: Environment parsing and startup checks
    - exceptions.py: Base exception hierarchy

Usage:
    from app.core import get_logger, sanitize_filename
"""

from .logging import (
    setup_logging,
    get_logger,
    set_request_id,
    set_job_id,
    set_course_id,
    clear_context,
    LogTimer,
)

from .security import (
    sanitize_filename,
    sanitize_object_name,
    validate_job_id,
    validate_path_within_directory,
    new_id,
    stable_id,
)

from .runtime import (
    parse_bool_env,
    env_int,
    env_float,
    assert_directory_writable,
    run_startup_runtime_checks,
)

from .exceptions import (
    CourseGenerationError,
    PipelineError,
    PersistenceError,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_request_id",
    "set_job_id",
    "set_course_id",
    "clear_context",
    "LogTimer",
    # Security
    "sanitize_filename",
    "sanitize_object_name",
    "validate_job_id",
    "validate_path_within_directory",
    "new_id",
    "stable_id",
    # Runtime
    "parse_bool_env",
    "env_int",
    "env_float",
    "assert_directory_writable",
    "run_startup_runtime_checks",
    # Exceptions
    "CourseGenerationError",
    "PipelineError",
    "PersistenceError",
]
