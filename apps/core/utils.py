# apps/core/utils.py

import json
from typing import Dict

from django.http import HttpResponse, JsonResponse

from .exceptions import BadRequest, ValidationFailed


def parse_json_body(request) -> Dict:
    """
    Decodes the request body as a JSON object
    An empty body is treated as {}
    """
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise BadRequest('Invalid JSON body')

    if not isinstance(payload, dict):
        raise BadRequest('Invalid JSON body')
    return payload


def validate_form(form_class, data, **kwargs):
    """Binds and validates a form, raising ValidationFailed on errors"""
    form = form_class(data=data, **kwargs)
    if not form.is_valid():
        raise ValidationFailed.from_form(form)
    return form


def provided_fields(form, payload):
    """Cleaned values restricted to the keys present in the payload"""
    return {
        name: value
        for name, value in form.cleaned_data.items()
        if name in payload
    }


def json_response(data, status=200) -> JsonResponse:
    return JsonResponse(data, status=status, safe=not isinstance(data, list))


def created(data) -> JsonResponse:
    return json_response(data, status=201)


def no_content() -> HttpResponse:
    return HttpResponse(status=204)


def isoformat(value):
    return value.isoformat() if value else None
