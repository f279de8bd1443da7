from rest_framework.pagination import PageNumberPagination


class StandardPagination(PageNumberPagination):
    """
    Page-number pagination shared by every list endpoint.

    Clients may ask for a different page size with ?page_size=, capped at
    ``max_page_size``.
    """

    page_size = 25
    page_size_query_param = "page_size"
    max_page_size = 100
