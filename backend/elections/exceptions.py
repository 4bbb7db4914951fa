from rest_framework import status
from rest_framework.exceptions import APIException


class DuplicateVoteError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Este estudiante ya ha votado en esta elección."
    default_code = "duplicate_vote"

    # portal_exception_handler copies the code into the response body.
    expose_code = True
