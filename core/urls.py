from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # Dashboard
    path('', views.index, name='index'),

    # Academic years
    path('academic-years/', views.academic_year_list, name='academic_year_list'),
    path('academic-years/create/', views.academic_year_create, name='academic_year_create'),
    path('academic-years/<int:pk>/update/', views.academic_year_update, name='academic_year_update'),
    path('academic-years/<int:pk>/delete/', views.academic_year_delete, name='academic_year_delete'),
    path('academic-years/<int:pk>/set-current/', views.academic_year_set_current, name='academic_year_set_current'),
    path('academic-years/<int:pk>/dates/', views.session_update_dates, name='session_update_dates'),

    # Terms
    path('terms/', views.term_list, name='term_list'),
    path('terms/create/', views.term_create, name='term_create'),
    path('terms/<int:pk>/update/', views.term_update, name='term_update'),
    path('terms/<int:pk>/delete/', views.term_delete, name='term_delete'),
    path('terms/<int:pk>/set-current/', views.term_set_current, name='term_set_current'),
    path('terms/<int:pk>/lock/', views.term_lock_grades, name='term_lock_grades'),
    path('terms/<int:pk>/unlock/', views.term_unlock_grades, name='term_unlock_grades'),
    path('terms/<int:pk>/dates/', views.term_update_dates, name='term_update_dates'),

    # Calendar
    path('calendar/', views.calendar_data, name='calendar_data'),

    # Settings
    path('settings/school/', views.school_information, name='school_information'),
    path('settings/admission/', views.admission_settings, name='admission_settings'),
]
