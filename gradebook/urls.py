from django.urls import path
from . import views

app_name = 'gradebook'

urlpatterns = [
    # Grading System CRUD
    path('grading-systems/', views.grading_system_list, name='grading_systems'),
    path('grading-systems/create/', views.grading_system_create, name='grading_system_create'),
    path('grading-systems/<uuid:pk>/', views.grading_system_detail, name='grading_system_detail'),
    path('grading-systems/<uuid:pk>/update/', views.grading_system_update, name='grading_system_update'),
    path('grading-systems/<uuid:pk>/delete/', views.grading_system_delete, name='grading_system_delete'),
    path('grading-systems/<uuid:pk>/set-default/', views.grading_system_set_default, name='grading_system_set_default'),

    # Grade Level CRUD
    path('grading-systems/<uuid:system_id>/levels/create/', views.grade_level_create, name='grade_level_create'),
    path('grade-levels/<uuid:pk>/update/', views.grade_level_update, name='grade_level_update'),
    path('grade-levels/<uuid:pk>/delete/', views.grade_level_delete, name='grade_level_delete'),

    # Score Entry
    path('scores/<int:class_term_id>/<int:subject_id>/', views.assessment_list, name='assessment_list'),
    path('scores/save/', views.assessment_save, name='assessment_save'),

    # Results
    path('results/<int:class_term_id>/', views.class_term_results, name='class_term_results'),
    path('results/<int:class_term_id>/statistics/', views.class_statistics, name='class_statistics'),
    path('results/<int:class_term_id>/publish/', views.publish_results, name='publish_results'),
    path('results/<int:class_term_id>/export/', views.results_export, name='results_export'),

    # Report Cards
    path('reports/<int:student_id>/', views.student_report, name='student_report'),
]
