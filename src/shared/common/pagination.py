# src/shared/common/pagination.py
"""
Pagination for list endpoints
"""

from typing import Any, Dict
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """
    Page number pagination wrapped in the ``success`` envelope.

    Course and exam lists use ``?page=`` and ``?page_size=`` (max 100).
    """

    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_page_meta(self) -> Dict[str, Any]:
        paginator = self.page.paginator
        return {
            'count': paginator.count,
            'total_pages': paginator.num_pages,
            'current_page': self.page.number,
            'page_size': self.get_page_size(self.request),
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
        }

    def get_paginated_response(self, data: Any) -> Response:
        return Response({'success': True, **self.get_page_meta(), 'results': data})

    def get_paginated_response_schema(self, schema: Dict) -> Dict:
        integer = {'type': 'integer'}
        link = {'type': 'string', 'format': 'uri', 'nullable': True}
        return {
            'type': 'object',
            'required': ['success', 'count', 'results'],
            'properties': {
                'success': {'type': 'boolean'},
                'count': integer,
                'total_pages': integer,
                'current_page': integer,
                'page_size': integer,
                'next': link,
                'previous': link,
                'results': schema,
            }
        }
