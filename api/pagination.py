from __future__ import annotations

from rest_framework.pagination import PageNumberPagination


class DefaultPagination(PageNumberPagination):
    """Page-number pagination for list endpoints (users, challenges, posts).

    - Default page_size: 20 (matches settings)
    - Client may request `?page_size=N` up to `max_page_size`

    Conversation messages page by limit/offset in `messaging.services`
    instead, with the same cap.
    """

    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100
