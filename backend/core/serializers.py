from __future__ import annotations

from rest_framework import serializers


class StrictFieldsMixin:
    """Reject payload keys that are not declared on the serializer.

    Declared read-only fields (``id``, timestamps) are tolerated and ignored, so
    clients may send back an object they previously read.
    """

    unknown_field_message = "Campo no permitido."

    def to_internal_value(self, data):
        if hasattr(data, "keys"):
            unknown = sorted(str(key) for key in data.keys() if key not in self.fields)
            if unknown:
                raise serializers.ValidationError({key: [self.unknown_field_message] for key in unknown})
        return super().to_internal_value(data)
