"""Generic filtering, sorting, field projection and pagination for list queries.

``QueryFeatures`` wraps a SQLAlchemy ``Query`` and the raw request parameters.
Each operation configures one independent facet (criteria, ordering,
projection, page window); the final query is assembled on access, so the
operations may be chained in any order.

    features = (
        QueryFeatures(db.query(User), User, params)
        .filter()
        .sort()
        .limit_fields()
        .paginate()
    )
    users = features.all()
    meta = features.pagination_meta(features.count())
"""
import math
import operator
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic.alias_generators import to_camel
from sqlalchemy import asc, desc, inspect as sa_inspect
from sqlalchemy.orm import Query, load_only

from sitecms.core.exceptions import InvalidFilter, ValidationFailed

RESERVED_PARAMS = ("page", "limit", "sort", "fields")

RANGE_OPERATORS = {
    "gte": operator.ge,
    "gt": operator.gt,
    "lte": operator.le,
    "lt": operator.lt,
}

DEFAULT_SORT = "-created_at"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_BRACKET_KEY = re.compile(r"^(?P<field>[A-Za-z_]\w*)\[(?P<op>\w+)\]$")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def parse_query_params(items: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    """Fold raw query-string pairs into the nested mapping used by the engine.

    ``price[gte]=10`` becomes ``{"price": {"gte": "10"}}`` and repeated keys
    become lists.
    """
    params: Dict[str, Any] = {}
    for key, value in items:
        match = _BRACKET_KEY.match(key)
        if match:
            field = match.group("field")
            if not isinstance(params.get(field), dict):
                params[field] = {}
            params[field][match.group("op")] = value
            continue

        if key in params and not isinstance(params[key], dict):
            existing = params[key]
            params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


def get_pagination_meta(total: int, page: int, limit: int) -> Dict[str, Any]:
    """Pagination metadata for a result set of ``total`` rows."""
    if limit < 1:
        raise ValueError("limit must be at least 1")

    total_pages = math.ceil(total / limit) if total > 0 else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": total > 0 and page > 1,
    }


def _first(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[-1] if value else None
    return value


def _split_csv(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        value = ",".join(str(v) for v in value)
    return [part.strip() for part in str(value).split(",") if part.strip()]


class QueryFeatures:
    """Configures a store query from raw request parameters."""

    def __init__(
        self,
        query: Query,
        model,
        params: Optional[Mapping[str, Any]] = None,
        default_sort: str = DEFAULT_SORT,
        hidden_fields: Sequence[str] = ("password_hash",)
    ):
        self._base_query = query
        self.model = model
        self.params = dict(params or {})
        self.hidden_fields = set(hidden_fields)
        self._mapper = sa_inspect(model)
        self._pk_key = self._mapper.get_property_by_column(self._mapper.primary_key[0]).key

        self._criteria: List[Any] = []
        self._ordering = self._parse_sort(default_sort)
        self.fields: Optional[List[str]] = None
        self.page = DEFAULT_PAGE
        self.limit = DEFAULT_LIMIT

    # -- operations -----------------------------------------------------

    def filter(self) -> "QueryFeatures":
        """Turn non-reserved params into equality, membership or range criteria."""
        criteria = []
        for name, value in self.params.items():
            if name in RESERVED_PARAMS:
                continue

            attr = self._resolve_attribute(name)
            if isinstance(value, Mapping):
                for op_name, raw in value.items():
                    op = RANGE_OPERATORS.get(op_name)
                    if op is None:
                        raise InvalidFilter(f"Unsupported operator '{op_name}' for field '{name}'")
                    criteria.append(op(attr, self._coerce(attr, name, _first(raw))))
            elif isinstance(value, (list, tuple)):
                criteria.append(attr.in_([self._coerce(attr, name, v) for v in value]))
            else:
                criteria.append(attr == self._coerce(attr, name, value))

        self._criteria = criteria
        return self

    def sort(self) -> "QueryFeatures":
        """Apply ``sort=field,-other``; falls back to the default order."""
        if self.params.get("sort"):
            self._ordering = self._parse_sort(self.params["sort"])
        return self

    def limit_fields(self) -> "QueryFeatures":
        """Restrict loaded columns to ``fields=a,b``; primary key always included."""
        names = _split_csv(self.params.get("fields"))
        if names:
            keys = []
            for name in names:
                key = self._resolve_attribute(name).key
                if key not in keys:
                    keys.append(key)
            self.fields = keys
        return self

    def paginate(self) -> "QueryFeatures":
        """Read ``page`` (min 1) and ``limit`` (must be at least 1)."""
        raw_page = _first(self.params.get("page"))
        try:
            page = int(raw_page) if raw_page not in (None, "") else DEFAULT_PAGE
        except (TypeError, ValueError):
            page = DEFAULT_PAGE
        self.page = max(page, 1)

        raw_limit = _first(self.params.get("limit"))
        if raw_limit in (None, ""):
            self.limit = DEFAULT_LIMIT
            return self
        try:
            limit = int(raw_limit)
        except (TypeError, ValueError):
            limit = 0
        if limit < 1:
            raise ValidationFailed(
                "Validation failed",
                errors=[{"field": "limit", "message": "Limit must be 1-100", "value": raw_limit}],
            )
        self.limit = limit
        return self

    # -- results --------------------------------------------------------

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def filtered_query(self) -> Query:
        return self._base_query.filter(*self._criteria)

    @property
    def query(self) -> Query:
        query = self.filtered_query().order_by(*self._ordering)
        if self.fields:
            attrs = [getattr(self.model, key) for key in self.fields]
            query = query.options(load_only(*attrs))
        return query.offset(self.skip).limit(self.limit)

    def all(self) -> list:
        return self.query.all()

    def count(self) -> int:
        return self.filtered_query().order_by(None).count()

    def pagination_meta(self, total: int) -> Dict[str, Any]:
        return get_pagination_meta(total, self.page, self.limit)

    def project(self, record) -> Dict[str, Any]:
        """Serialize only the projected columns of a loaded record."""
        keys = [self._pk_key] + [key for key in (self.fields or []) if key != self._pk_key]
        return {
            "id" if key == self._pk_key else to_camel(key): getattr(record, key)
            for key in keys
        }

    # -- helpers --------------------------------------------------------

    def _resolve_attribute(self, name: str):
        if name == "id":
            return getattr(self.model, self._pk_key)

        columns = {prop.key for prop in self._mapper.column_attrs}
        for candidate in (name, to_snake(name)):
            if candidate in columns and candidate not in self.hidden_fields:
                return getattr(self.model, candidate)
        raise InvalidFilter(f"Unknown field '{name}'")

    def _parse_sort(self, value: Any) -> List[Any]:
        ordering = []
        for token in _split_csv(value):
            direction = desc if token.startswith("-") else asc
            ordering.append(direction(self._resolve_attribute(token.lstrip("-+"))))
        return ordering

    @staticmethod
    def _coerce(attr, name: str, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        try:
            python_type = attr.type.python_type
        except NotImplementedError:
            return value

        try:
            if python_type is bool:
                lowered = value.lower()
                if lowered in _TRUE_VALUES:
                    return True
                if lowered in _FALSE_VALUES:
                    return False
                raise ValueError(value)
            if python_type is datetime:
                return datetime.fromisoformat(value)
            if python_type is date:
                return date.fromisoformat(value)
            return python_type(value)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise InvalidFilter(f"Invalid value '{value}' for field '{name}'") from e
