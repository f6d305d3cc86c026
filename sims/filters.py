"""Jinja2 template filters."""

SCOPE_LABELS = {
    'student.read': 'Read your student record',
    'courses.read': 'Read your course registrations',
}


def scope_label(scope: str) -> str:
    """Get a human-readable description of an OAuth2 scope."""
    return SCOPE_LABELS.get(scope, scope)
