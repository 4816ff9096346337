"""
Students views package.

- students: Student CRUD, enrolment and admission numbers
- parents: Parents and their links to students
- transitions: Promotion, repetition and transfer between class terms
- dashboards: Student and parent landing pages
- utils: Lookups and enrolment helpers
"""

# Student views
from .students import (
    student_list,
    student_detail,
    student_create,
    student_update,
    student_toggle_status,
    student_enrol,
    admission_preview,
)

# Parent views
from .parents import (
    parent_list,
    parent_detail,
    parent_create,
    parent_update,
    parent_delete,
    parent_link_student,
    parent_unlink_student,
    unlinked_students,
)

# Transition views
from .transitions import (
    transition_candidates,
    transition_execute,
    transition_history,
    transition_statistics,
)

# Dashboard views
from .dashboards import (
    student_dashboard,
    parent_dashboard,
    student_dashboard_data,
    parent_dashboard_data,
)

__all__ = [
    # Students
    'student_list',
    'student_detail',
    'student_create',
    'student_update',
    'student_toggle_status',
    'student_enrol',
    'admission_preview',
    # Parents
    'parent_list',
    'parent_detail',
    'parent_create',
    'parent_update',
    'parent_delete',
    'parent_link_student',
    'parent_unlink_student',
    'unlinked_students',
    # Transitions
    'transition_candidates',
    'transition_execute',
    'transition_history',
    'transition_statistics',
    # Dashboards
    'student_dashboard',
    'parent_dashboard',
    'student_dashboard_data',
    'parent_dashboard_data',
]
