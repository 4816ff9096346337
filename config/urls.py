from django.urls import path, include


urlpatterns = [
    path('', include('core.urls')),
    path('accounts/', include('accounts.urls')),
    path('academics/', include('academics.urls')),
    path('students/', include('students.urls')),
    path('teachers/', include('teachers.urls')),
    path('gradebook/', include('gradebook.urls')),
]
