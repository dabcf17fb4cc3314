import structlog
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import errors
from ..serializers import (
    PullRequestCreateInputSerializer,
    PullRequestMergeInputSerializer,
    PullRequestSerializer,
    ReassignInputSerializer,
)
from ..services import PullRequestService

logger = structlog.get_logger(__name__)


@api_view(['POST'])
def pullrequest_create(request):
    """POST /pullRequest/create - create a PR and assign up to two reviewers"""
    try:
        serializer = PullRequestCreateInputSerializer(data=request.data)
        if not serializer.is_valid():
            return errors.invalid_input_response(serializer)

        data = serializer.validated_data
        state = PullRequestService().create_pull_request(
            data['pull_request_id'], data['pull_request_name'], data['author_id'])

        return Response({
            'pr': PullRequestSerializer(state).data
        }, status=status.HTTP_201_CREATED)

    except ObjectDoesNotExist as e:
        return errors.error_response(errors.NOT_FOUND, str(e))
    except ValidationError as e:
        return errors.validation_error_response(e)
    except DatabaseError:
        logger.exception('pr_create_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('pr_create_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')


@api_view(['POST'])
def pullrequest_merge(request):
    """POST /pullRequest/merge - mark a PR as MERGED (idempotent)"""
    try:
        serializer = PullRequestMergeInputSerializer(data=request.data)
        if not serializer.is_valid():
            return errors.invalid_input_response(serializer)

        state = PullRequestService().merge_pull_request(serializer.validated_data['pull_request_id'])

        return Response({
            'pr': PullRequestSerializer(state).data
        })

    except ObjectDoesNotExist as e:
        return errors.error_response(errors.NOT_FOUND, str(e))
    except DatabaseError:
        logger.exception('pr_merge_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('pr_merge_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')


@api_view(['POST'])
def pullrequest_reassign(request):
    """POST /pullRequest/reassign - replace one reviewer with a teammate"""
    try:
        serializer = ReassignInputSerializer(data=request.data)
        if not serializer.is_valid():
            return errors.invalid_input_response(serializer)

        data = serializer.validated_data
        result = PullRequestService().reassign_reviewer(data['pull_request_id'], data['old_user_id'])

        return Response({
            'pr': PullRequestSerializer(result).data,
            'replaced_by': result.replaced_by
        })

    except ObjectDoesNotExist as e:
        return errors.error_response(errors.NOT_FOUND, str(e))
    except ValidationError as e:
        return errors.validation_error_response(e)
    except DatabaseError:
        logger.exception('pr_reassign_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('pr_reassign_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')
