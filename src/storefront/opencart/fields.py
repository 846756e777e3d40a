"""Field types for quirks of the OpenCart schema."""

from django.db import models

ZERO_DATE = "0000-00-00"


class OpenCartDateField(models.DateField):
    """DATE column where OpenCart stores ``0000-00-00`` for "no date".

    MySQLdb reads the zero date as ``None`` and MySQL matches it with
    ``IS NULL`` on NOT NULL columns, so the ORM treats it as null. Writing
    ``None`` to MySQL sends the zero date back.
    """

    def get_db_prep_value(self, value, connection, prepared=False):
        value = super().get_db_prep_value(value, connection, prepared)
        if value is None and connection.vendor == "mysql":
            return ZERO_DATE
        return value
