from werkzeug.routing import IntegerConverter

from .constants import SQL_INT_MAX


class BoundedIntConverter(IntegerConverter):
    """``<int:...>`` that only matches ids a SQL INTEGER column can hold; larger ones 404."""

    def __init__(self, map, *args, **kwargs):
        kwargs.setdefault("max", SQL_INT_MAX)
        super().__init__(map, *args, **kwargs)
