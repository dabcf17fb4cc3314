import structlog
from django.db import DatabaseError
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import errors
from ..serializers import StatsSerializer
from ..services import StatsService

logger = structlog.get_logger(__name__)


@api_view(['GET'])
def stats_overview(request):
    """GET /statistics - review load per user and reviewer coverage per PR"""
    try:
        stats = StatsService().get_statistics()
        return Response(StatsSerializer(stats).data)

    except DatabaseError:
        logger.exception('statistics_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('statistics_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')
