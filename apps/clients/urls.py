"""
Client URL configuration.
"""

from django.urls import path

from apps.clients.views import RegisterClientView

urlpatterns = [
    path('register', RegisterClientView.as_view(), name='register'),
]
