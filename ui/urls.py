"""Public UI routes for EnglishMastery."""
from django.urls import path
from .views import index


urlpatterns = [
    path("", index, name="index"),
]
