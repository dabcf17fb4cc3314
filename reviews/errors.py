"""Error codes shared by the services and the API views.

Services raise ``ObjectDoesNotExist`` for missing resources and
``ValidationError`` carrying one of the codes below for rule violations.
"""

from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response

NOT_FOUND = 'NOT_FOUND'
PR_EXISTS = 'PR_EXISTS'
PR_MERGED = 'PR_MERGED'
NOT_ASSIGNED = 'NOT_ASSIGNED'
NO_CANDIDATE = 'NO_CANDIDATE'
TEAM_EXISTS = 'TEAM_EXISTS'
BAD_REQUEST = 'BAD_REQUEST'
TRANSIENT_ERROR = 'TRANSIENT_ERROR'
SERVER_ERROR = 'SERVER_ERROR'

HTTP_STATUS = {
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    PR_EXISTS: status.HTTP_409_CONFLICT,
    PR_MERGED: status.HTTP_409_CONFLICT,
    NOT_ASSIGNED: status.HTTP_409_CONFLICT,
    NO_CANDIDATE: status.HTTP_409_CONFLICT,
    TEAM_EXISTS: status.HTTP_409_CONFLICT,
    TRANSIENT_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def rule_violation(code: str, message: str) -> ValidationError:
    return ValidationError(message, code=code)


def error_response(code: str, message: str) -> Response:
    return Response({
        'error': {
            'code': code,
            'message': message,
        }
    }, status=HTTP_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR))


def validation_error_response(e: ValidationError) -> Response:
    code = e.code if getattr(e, 'code', None) else BAD_REQUEST
    return error_response(code, e.messages[0] if e.messages else code)


def _first_error(detail, path=''):
    if isinstance(detail, dict):
        for key, value in detail.items():
            found = _first_error(value, f'{path}.{key}' if path else str(key))
            if found:
                return found
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                found = _first_error(value, f'{path}[{index}]')
                if found:
                    return found
            elif value:
                return f'{path}: {value}' if path else str(value)
    return None


def invalid_input_response(serializer) -> Response:
    """BAD_REQUEST naming the first field an input serializer rejected."""
    return error_response(BAD_REQUEST, _first_error(serializer.errors) or 'invalid request body')
