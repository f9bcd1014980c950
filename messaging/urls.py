from django.urls import path
from .views import conversation_history, inbox

app_name = "messaging"

urlpatterns = [
    path("inbox/", inbox, name="inbox"),
    path("conversations/<int:conversation_id>/history/", conversation_history, name="conversation-history"),
]
