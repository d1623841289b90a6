"""
Единый обработчик ошибок DRF.

Все ошибки API отдаются с ключом `error` (строка для UI) рядом со
стандартным `detail`/полями валидации. IntegrityError из БД (гонка на
уникальном slug) превращается в 400 вместо 500.
"""
import logging

from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _first_message(data):
    if isinstance(data, str):
        return data
    if isinstance(data, list) and data:
        return _first_message(data[0])
    if isinstance(data, dict):
        if 'detail' in data:
            return _first_message(data['detail'])
        for value in data.values():
            message = _first_message(value)
            if message:
                return message
    return ''


def api_exception_handler(exc, context):
    if isinstance(exc, IntegrityError):
        logger.warning('IntegrityError in %s: %s', context.get('view').__class__.__name__, exc)
        return Response(
            {'error': 'A record with these unique fields already exists'},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(response.data, dict):
        # ValidationError({'error': ...}) приходит списком, приводим к строке
        response.data['error'] = _first_message(response.data.get('error') or response.data)
    else:
        response.data = {'error': _first_message(response.data), 'detail': response.data}
    return response
