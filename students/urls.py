from django.urls import path
from . import views

app_name = 'students'

urlpatterns = [
    # Students
    path('', views.student_list, name='index'),
    path('create/', views.student_create, name='student_create'),
    path('admission-preview/', views.admission_preview, name='admission_preview'),
    path('<int:pk>/', views.student_detail, name='student_detail'),
    path('<int:pk>/update/', views.student_update, name='student_update'),
    path('<int:pk>/toggle-status/', views.student_toggle_status, name='student_toggle_status'),
    path('<int:pk>/enrol/', views.student_enrol, name='student_enrol'),

    # Parents
    path('parents/', views.parent_list, name='parent_index'),
    path('parents/create/', views.parent_create, name='parent_create'),
    path('parents/link/', views.parent_link_student, name='parent_link_student'),
    path('parents/unlinked-students/', views.unlinked_students, name='unlinked_students'),
    path('parents/<int:pk>/', views.parent_detail, name='parent_detail'),
    path('parents/<int:pk>/update/', views.parent_update, name='parent_update'),
    path('parents/<int:pk>/delete/', views.parent_delete, name='parent_delete'),
    path('parents/<int:pk>/unlink/<int:student_id>/', views.parent_unlink_student, name='parent_unlink_student'),

    # Transitions
    path('transitions/', views.transition_history, name='transition_history'),
    path('transitions/execute/', views.transition_execute, name='transition_execute'),
    path('transitions/candidates/<int:class_term_id>/', views.transition_candidates, name='transition_candidates'),
    path('transitions/statistics/<int:term_id>/', views.transition_statistics, name='transition_statistics'),

    # Dashboards
    path('dashboard/', views.student_dashboard, name='student_dashboard'),
    path('parents/dashboard/', views.parent_dashboard, name='parent_dashboard'),
]
