# apps/core/exceptions.py

"""
API errors

Views raise these and ApiErrorMiddleware turns them into JSON responses.
"""


class ApiError(Exception):
    """Error with an HTTP status and a client facing message"""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def as_dict(self):
        return {'error': self.message, 'status': self.status_code}


class BadRequest(ApiError):
    status_code = 400
    default_message = 'Bad request'


class Unauthorized(ApiError):
    status_code = 401
    default_message = 'Authentication required'


class Forbidden(ApiError):
    status_code = 403
    default_message = 'Forbidden'


class NotFound(ApiError):
    status_code = 404
    default_message = 'Not found'


class Conflict(ApiError):
    status_code = 409
    default_message = 'Conflict'


class ValidationFailed(ApiError):
    """
    Field level validation errors

    `errors` is a list of {"field", "message"} dicts.
    """

    status_code = 400
    default_message = 'Validation failed'

    def __init__(self, errors, message=None):
        self.errors = errors
        super().__init__(message)

    @classmethod
    def from_form(cls, form):
        """Flattens Django form errors into the API error list"""
        errors = []
        for field, messages in form.errors.get_json_data().items():
            for item in messages:
                errors.append({
                    'field': None if field == '__all__' else field,
                    'message': item['message'],
                })
        return cls(errors)

    def as_dict(self):
        return {'errors': self.errors}
