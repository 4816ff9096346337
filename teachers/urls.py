from django.urls import path
from . import views

app_name = 'teachers'

urlpatterns = [
    path('', views.teacher_list, name='index'),
    path('create/', views.teacher_create, name='teacher_create'),
    path('dashboard/', views.dashboard, name='dashboard'),
    path('<uuid:pk>/', views.teacher_detail, name='teacher_detail'),
    path('<uuid:pk>/update/', views.teacher_update, name='teacher_update'),
    path('<uuid:pk>/delete/', views.teacher_delete, name='teacher_delete'),
]
