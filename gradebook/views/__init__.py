"""
Gradebook views package.

- setup: Grading systems and grade levels
- scores: Score entry per class term and subject
- results: Ranked results, statistics, reports and publishing
- export: Excel broadsheet download
- base: Shared helpers and access checks
"""

# Setup views
from .setup import (
    grading_system_list,
    grading_system_detail,
    grading_system_create,
    grading_system_update,
    grading_system_delete,
    grading_system_set_default,
    grade_level_create,
    grade_level_update,
    grade_level_delete,
)

# Score entry views
from .scores import (
    assessment_list,
    assessment_save,
)

# Results views
from .results import (
    class_term_results,
    class_statistics,
    student_report,
    publish_results,
)

# Export views
from .export import (
    results_export,
)

__all__ = [
    # Setup
    'grading_system_list',
    'grading_system_detail',
    'grading_system_create',
    'grading_system_update',
    'grading_system_delete',
    'grading_system_set_default',
    'grade_level_create',
    'grade_level_update',
    'grade_level_delete',
    # Scores
    'assessment_list',
    'assessment_save',
    # Results
    'class_term_results',
    'class_statistics',
    'student_report',
    'publish_results',
    # Export
    'results_export',
]
