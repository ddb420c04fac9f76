# clinic_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    # budgets and price rows are browsed in screens of 25
    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 100


def paginate(request, queryset, serializer_class, *, context: dict | None = None) -> Response:
    """
    Every list endpoint answers { count, next, previous, results }.
    """
    paginator = DefaultPagination()
    page = paginator.paginate_queryset(queryset, request)
    ser = serializer_class(page, many=True, context={"request": request, **(context or {})})
    return paginator.get_paginated_response(ser.data)
