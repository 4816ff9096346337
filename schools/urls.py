from django.urls import path
from . import views

app_name = 'schools'

urlpatterns = [
    path('', views.platform_dashboard, name='dashboard'),
    path('schools/', views.school_list, name='school_list'),
    path('schools/create/', views.school_create, name='school_create'),
    path('schools/<int:pk>/', views.school_detail, name='school_detail'),
    path('schools/<int:pk>/update/', views.school_update, name='school_update'),
    path('schools/<int:pk>/toggle-active/', views.school_toggle_active, name='school_toggle_active'),
    path('schools/<int:pk>/delete/', views.school_delete, name='school_delete'),
    path('schools/<int:pk>/admins/', views.school_admin_list, name='school_admin_list'),
    path('schools/<int:pk>/admins/create/', views.school_admin_create, name='school_admin_create'),
    path('schools/<int:pk>/admins/<int:user_id>/', views.school_admin_detail, name='school_admin_detail'),
    path(
        'schools/<int:pk>/admins/<int:user_id>/toggle-active/',
        views.school_admin_toggle_active, name='school_admin_toggle_active',
    ),
    path('schools/<int:pk>/admins/<int:user_id>/delete/', views.school_admin_delete, name='school_admin_delete'),
]
