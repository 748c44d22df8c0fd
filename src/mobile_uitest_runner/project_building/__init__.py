"""Project building domain exports."""

from .project_builder import (
    PROJECT_FILE_EXTENSION,
    ProjectBuilder,
    app_build_settings,
    with_trailing_separator,
)

__all__ = [
    "PROJECT_FILE_EXTENSION",
    "ProjectBuilder",
    "app_build_settings",
    "with_trailing_separator",
]
