"""
Candidate file validation.

Pure functions that decide whether a candidate file is accepted by an upload
policy. Nothing here has side effects.
"""

import fnmatch
from typing import Iterable

from ..domain.uploads import RawFile, UploadPolicy, ValidationResult
from ..exceptions import ErrorKind
from ...utils.formatting import format_size


def validate(candidate: RawFile, policy: UploadPolicy) -> ValidationResult:
    """
    Screen a candidate file against a policy.

    Args:
        candidate: File to check
        policy: Size limit and allowed type patterns

    Returns:
        Accepted result, or a rejection carrying the error kind and message
    """
    if candidate.size > policy.max_size_bytes:
        return ValidationResult.reject(
            ErrorKind.SIZE_EXCEEDED,
            f"File exceeds the maximum size of {format_size(policy.max_size_bytes)}"
        )

    patterns = policy.allowed_type_patterns
    if patterns and not any(matches_type(candidate, p) for p in patterns):
        return ValidationResult.reject(
            ErrorKind.TYPE_NOT_ALLOWED,
            f"File type not allowed. Accepted types: {describe_patterns(patterns)}"
        )

    return ValidationResult.ok()


def matches_type(candidate: RawFile, pattern: str) -> bool:
    """
    Check a candidate against one allowed-type pattern.

    Patterns starting with a dot are file extensions compared against the
    end of the name; everything else is a MIME type glob such as ``image/*``.
    """
    pattern = pattern.strip().lower()
    if not pattern:
        return False

    if pattern.startswith('.'):
        return candidate.name.lower().endswith(pattern)

    mime_type = (candidate.mime_type or "").lower()
    if not mime_type:
        return False
    return fnmatch.fnmatchcase(mime_type, pattern)


def describe_patterns(patterns: Iterable[str]) -> str:
    return ", ".join(p.strip() for p in patterns)
