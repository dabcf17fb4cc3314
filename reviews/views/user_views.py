import structlog
from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import errors
from ..serializers import PullRequestShortSerializer, SetIsActiveInputSerializer, UserSerializer
from ..services import UserService

logger = structlog.get_logger(__name__)


@api_view(['POST'])
def user_set_active(request):
    """POST /users/setIsActive - set the user's active flag"""
    try:
        serializer = SetIsActiveInputSerializer(data=request.data)
        if not serializer.is_valid():
            return errors.invalid_input_response(serializer)

        data = serializer.validated_data
        user = UserService().set_is_active(data['user_id'], data['is_active'])

        return Response({
            'user': UserSerializer(user).data
        })

    except ObjectDoesNotExist:
        return errors.error_response(errors.NOT_FOUND, 'User not found')
    except DatabaseError:
        logger.exception('user_set_active_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('user_set_active_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')


@api_view(['GET'])
def users_get_review(request):
    """GET /users/getReview - PRs where the user is assigned as reviewer"""
    try:
        user_id = request.query_params.get('user_id')

        if not user_id:
            return errors.error_response(errors.BAD_REQUEST, 'user_id parameter is required')

        assigned_prs = UserService().get_review(user_id)
        serializer = PullRequestShortSerializer(assigned_prs, many=True)

        return Response({
            'user_id': user_id,
            'pull_requests': serializer.data
        })

    except ObjectDoesNotExist:
        return errors.error_response(errors.NOT_FOUND, 'User not found')
    except DatabaseError:
        logger.exception('user_get_review_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('user_get_review_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')
