import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ServiceError(APIException):
    """Base class for business-rule failures raised by the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'No se pudo completar la operación'
    default_code = 'service_error'


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Recurso no encontrado'
    default_code = 'not_found'


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'El recurso ya existe'
    default_code = 'conflict'


class UpstreamError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'No se pudo obtener el directorio de hospitales'
    default_code = 'upstream_error'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled error in %s', context.get('view'), exc_info=exc)
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': 'Error interno del servidor'}},
            status=500,
        )
    # normalize response
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
