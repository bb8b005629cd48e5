# config/urls.py

from django.contrib import admin
from django.urls import include, path

from apps.core import views as core_views

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # REST API
    path('api/', include('apps.core.urls')),
    path('api/', include('apps.board.urls')),
    path('api/', include('apps.reports.urls')),

    # Monitoring
    path('health', core_views.health_view, name='health'),
]

admin.site.site_header = 'Sprint Board Admin'
admin.site.site_title = 'Sprint Board'
admin.site.index_title = 'Administration'
