"""Consistency validation for the task board.

Example:
    >>> from gco.validation import ConsistencyValidator, GitCLI
    >>> validator = ConsistencyValidator(GitCLI(root))
    >>> issues = validator.validate(tasks)
    >>> collisions = validator.check_file_collisions(tasks)
"""

from gco.validation.git import GitCLI, GitService, branch_name_for, parse_branch_name
from gco.validation.validator import (
    CollisionParty,
    ConsistencyValidator,
    FileCollision,
    IssueLevel,
    ValidationIssue,
)

__all__ = [
    "CollisionParty",
    "ConsistencyValidator",
    "FileCollision",
    "GitCLI",
    "GitService",
    "IssueLevel",
    "ValidationIssue",
    "branch_name_for",
    "parse_branch_name",
]
