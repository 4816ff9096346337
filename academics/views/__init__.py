"""
Academics views package.

This package splits the views into logical modules:
- base: Common decorators and lookup helpers
- classes: Class CRUD and class teacher
- subjects: Subject CRUD
- class_terms: Classes offered per term, subject allocation, subject teachers
"""

# Classes
from .classes import (
    classes_list,
    class_detail,
    class_create,
    class_update,
    class_delete,
    class_set_teacher,
)

# Subjects
from .subjects import (
    subjects_list,
    subject_detail,
    subject_create,
    subject_update,
    subject_delete,
)

# Class terms
from .class_terms import (
    term_classes,
    class_term_detail,
    class_term_assign,
    class_term_remove,
    class_term_assign_subjects,
    class_term_subject_assign_teacher,
    class_term_subject_unassign_teacher,
)

__all__ = [
    # Classes
    'classes_list',
    'class_detail',
    'class_create',
    'class_update',
    'class_delete',
    'class_set_teacher',
    # Subjects
    'subjects_list',
    'subject_detail',
    'subject_create',
    'subject_update',
    'subject_delete',
    # Class terms
    'term_classes',
    'class_term_detail',
    'class_term_assign',
    'class_term_remove',
    'class_term_assign_subjects',
    'class_term_subject_assign_teacher',
    'class_term_subject_unassign_teacher',
]
