import structlog
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import errors
from ..serializers import DeactivationSerializer, TeamInputSerializer, TeamNameInputSerializer, TeamSerializer
from ..services import TeamService

logger = structlog.get_logger(__name__)


@api_view(['POST'])
def team_add(request):
    """POST /team/add - create a team with its members"""
    try:
        serializer = TeamInputSerializer(data=request.data)
        if not serializer.is_valid():
            return errors.invalid_input_response(serializer)

        data = serializer.validated_data
        team = TeamService().add_team(data['team_name'], data['members'])

        return Response({
            'team': TeamSerializer(team).data
        }, status=status.HTTP_201_CREATED)

    except ValidationError as e:
        return errors.validation_error_response(e)
    except DatabaseError:
        logger.exception('team_add_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('team_add_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')


@api_view(['GET'])
def team_get(request):
    """GET /team/get - team with its members"""
    try:
        team_name = request.query_params.get('team_name')

        if not team_name:
            return errors.error_response(errors.BAD_REQUEST, 'team_name parameter is required')

        team = TeamService().get_team(team_name)

        return Response(TeamSerializer(team).data)

    except ObjectDoesNotExist:
        return errors.error_response(errors.NOT_FOUND, 'Team not found')
    except DatabaseError:
        logger.exception('team_get_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('team_get_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')


@api_view(['POST'])
def team_deactivate(request):
    """POST /team/deactivate - deactivate every member and drop their open reviews"""
    try:
        serializer = TeamNameInputSerializer(data=request.data)
        if not serializer.is_valid():
            return errors.invalid_input_response(serializer)

        result = TeamService().deactivate_team(serializer.validated_data['team_name'])

        return Response(DeactivationSerializer(result).data)

    except ObjectDoesNotExist:
        return errors.error_response(errors.NOT_FOUND, 'Team not found')
    except DatabaseError:
        logger.exception('team_deactivate_storage_failure')
        return errors.error_response(errors.TRANSIENT_ERROR, 'Storage temporarily unavailable')
    except Exception:
        logger.exception('team_deactivate_failed')
        return errors.error_response(errors.SERVER_ERROR, 'Internal server error')
