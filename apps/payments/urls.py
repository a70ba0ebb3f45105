from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    # Checkout creation (JSON API)
    path('create_preference', views.create_preference, name='create_preference'),
    path('create_membership', views.create_membership, name='create_membership'),

    # Mercado Pago back_urls: browser returns here after checkout
    path('success', views.payment_success, name='success'),
    path('failure', views.payment_failure, name='failure'),
    path('pending', views.payment_pending, name='pending'),

    # Mercado Pago server-side notification (CSRF-exempt)
    path('webhook', views.payment_webhook, name='webhook'),
]
