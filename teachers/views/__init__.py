"""
Teachers views package.

- teachers: Teacher CRUD
- dashboard: The signed-in teacher's current-term workload
- utils: Access helpers
"""

# Teacher views
from .teachers import (
    teacher_list,
    teacher_detail,
    teacher_create,
    teacher_update,
    teacher_delete,
)

# Dashboard views
from .dashboard import (
    dashboard,
    teacher_dashboard_data,
)

__all__ = [
    # Teachers
    'teacher_list',
    'teacher_detail',
    'teacher_create',
    'teacher_update',
    'teacher_delete',
    # Dashboard
    'dashboard',
    'teacher_dashboard_data',
]
