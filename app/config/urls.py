"""
URL configuration for the Django application.

URL Structure:
    /admin/                        - Django admin interface

Chat has no HTTP surface of its own; transport layers call
chat.services directly.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
]
