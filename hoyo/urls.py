"""
URL configuration for the Hoyo en Uno payments backend.
"""
from django.contrib import admin
from django.conf import settings
from django.urls import path, include

from apps.payments import views as payment_views

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path('', payment_views.index, name='index'),
    path('payment/', include('apps.payments.urls', namespace='payments')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [path('__debug__/', include(debug_toolbar.urls))] + urlpatterns
