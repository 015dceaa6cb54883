from rest_framework import status
from rest_framework.response import Response


def paginated_response(request, qs, serializer_class, context=None):
    """
    limit/offset pagination shared by the list endpoints.
    Returns {"count", "results", "limit", "offset"}.
    """
    total_count = qs.count()
    try:
        limit = int(request.query_params.get("limit", 50))
        offset = int(request.query_params.get("offset", 0))
    except (TypeError, ValueError):
        limit, offset = 50, 0
    limit = max(1, min(limit, 100))
    offset = max(0, offset)

    page = qs[offset : offset + limit]
    serializer = serializer_class(page, many=True, context=context or {"request": request})
    return Response({
        "count": total_count,
        "results": serializer.data,
        "limit": limit,
        "offset": offset,
    }, status=status.HTTP_200_OK)


def ok(data, status_code=status.HTTP_200_OK):
    """Success envelope matching the error format of core.exceptions."""
    return Response({"success": True, "data": data}, status=status_code)
