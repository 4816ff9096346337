from django.urls import path
from . import views

app_name = 'academics'

urlpatterns = [
    # Classes
    path('classes/', views.classes_list, name='classes'),
    path('classes/create/', views.class_create, name='class_create'),
    path('classes/<int:pk>/', views.class_detail, name='class_detail'),
    path('classes/<int:pk>/update/', views.class_update, name='class_update'),
    path('classes/<int:pk>/delete/', views.class_delete, name='class_delete'),
    path('classes/<int:pk>/class-teacher/', views.class_set_teacher, name='class_set_teacher'),

    # Subjects
    path('subjects/', views.subjects_list, name='subjects'),
    path('subjects/create/', views.subject_create, name='subject_create'),
    path('subjects/<int:pk>/', views.subject_detail, name='subject_detail'),
    path('subjects/<int:pk>/update/', views.subject_update, name='subject_update'),
    path('subjects/<int:pk>/delete/', views.subject_delete, name='subject_delete'),

    # Class terms
    path('terms/<int:term_id>/classes/', views.term_classes, name='term_classes'),
    path('class-terms/assign/', views.class_term_assign, name='class_term_assign'),
    path('class-terms/<int:pk>/', views.class_term_detail, name='class_term_detail'),
    path('class-terms/<int:pk>/remove/', views.class_term_remove, name='class_term_remove'),
    path('class-terms/<int:pk>/subjects/', views.class_term_assign_subjects, name='class_term_assign_subjects'),
    path('class-terms/<int:pk>/subjects/<int:subject_id>/teacher/',
         views.class_term_subject_assign_teacher, name='class_term_subject_assign_teacher'),
    path('class-terms/<int:pk>/subjects/<int:subject_id>/teacher/remove/',
         views.class_term_subject_unassign_teacher, name='class_term_subject_unassign_teacher'),
]
