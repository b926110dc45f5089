from .collection import PostCollection, DuplicateSlugError
from .linter import PostLinter, LintIssue, LintReport
from .publisher import PostPublisher

__all__ = [
    "PostCollection",
    "DuplicateSlugError",
    "PostLinter",
    "LintIssue",
    "LintReport",
    "PostPublisher",
]
