from rest_framework.pagination import LimitOffsetPagination  # type: ignore


class StandardLimitOffsetPagination(LimitOffsetPagination):
    """``?limit=&offset=`` paging; ``PAGE_SIZE`` is the default limit."""

    max_limit = 100
