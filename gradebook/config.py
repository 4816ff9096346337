"""
Configuration settings for the gradebook app.

These values can be overridden in Django settings by prefixing with GRADEBOOK_.
For example, to change the exam maximum:
    GRADEBOOK_EXAM_MAX_SCORE = Decimal('60')

All configuration values are lazily loaded to avoid Django setup issues.
"""
from decimal import Decimal


def _get_setting(name, default):
    """Get a gradebook setting from Django settings or use default."""
    from django.conf import settings
    return getattr(settings, f'GRADEBOOK_{name}', default)


_DEFAULTS = {
    # Component maxima (3 x CA + exam = 100)
    'CA_MAX_SCORE': Decimal('10'),
    'EXAM_MAX_SCORE': Decimal('70'),

    # Fallback grading when a school has no default grading system
    'DEFAULT_PASS_MARK': Decimal('40.00'),

    # Bulk operation settings
    'BULK_UPDATE_BATCH_SIZE': 500,

    # Dashboard display limits
    'TOP_PERFORMERS_LIMIT': 5,

    # Export settings
    'EXCEL_HEADER_COLOR': '4F46E5',
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


_config = _ConfigProxy()


def __getattr__(name):
    """Enable module-level attribute access via the config proxy."""
    return getattr(_config, name)
