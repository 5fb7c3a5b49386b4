"""
Configuration settings for the gradebook app.

These values can be overridden in Django settings by prefixing with GRADEBOOK_.
For example, to change MARKS_PAGE_SIZE:
    GRADEBOOK_MARKS_PAGE_SIZE = 500

All configuration values are lazily loaded to avoid Django setup issues.
"""


def _get_setting(name, default):
    """Get a gradebook setting from Django settings or use default."""
    from django.conf import settings
    return getattr(settings, f'GRADEBOOK_{name}', default)


# Define defaults as constants for direct use when Django settings are not needed
_DEFAULTS = {
    # Marks are out of 20; a subject or term average at or above this passes
    'PASS_MARK': 12,

    # Statistics thresholds
    'CREDIT_MARK': 10,
    'FAIL_MARK': 5,

    # Rows fetched per page when scanning marks for statistics
    'MARKS_PAGE_SIZE': 1000,

    # Department score = pass rate weight + performance weight
    'DEPARTMENT_PASS_RATE_WEIGHT': 0.65,
    'DEPARTMENT_PERFORMANCE_WEIGHT': 0.35,

    # Top/bottom courses and students in the statistics document
    'RANKING_LIMIT': 3,

    # Report headers
    'INSTITUTION_NAME': 'GTTTC KUMBA',

    # Export settings
    'EXCEL_HEADER_COLOR': 'F0F0F0',
    'EXCEL_FAIL_FONT_COLOR': 'FF0000',
    'EXCEL_STRIPE_COLOR': 'F9F9F9',

    # Rate limits (django-ratelimit syntax)
    'STATISTICS_RATE_LIMIT': '60/h',
    'REPORT_CARDS_RATE_LIMIT': '30/h',
}


class _ConfigProxy:
    """
    Lazy configuration proxy that loads settings only when accessed.
    This avoids Django setup issues during module import.
    """

    def __getattr__(self, name):
        if name in _DEFAULTS:
            return _get_setting(name, _DEFAULTS[name])
        raise AttributeError(f"Unknown config setting: {name}")


# Module-level proxy object for attribute access
_config = _ConfigProxy()


def __getattr__(name):
    """Enable module-level attribute access via the config proxy."""
    return getattr(_config, name)
