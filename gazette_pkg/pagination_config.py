"""
Pagination options as written in front matter, and their resolved form.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import List, Optional, Tuple

from .errors import ConfigurationError

DEFAULT_PER_PAGE = 10
DEFAULT_PERMALINK_SUFFIX = '{{num}}/'
DEFAULT_SORT = 'published_date'


class _ParsableEnum(Enum):

    @classmethod
    def parse(cls, value, field, source=None):
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        choices = ', '.join(member.value for member in cls)
        raise ConfigurationError(f"invalid {field} '{value}', expected one of: {choices}", source)


class Include(_ParsableEnum):
    NONE = 'none'
    ALL = 'all'
    TAGS = 'tags'
    CATEGORIES = 'categories'
    DATES = 'dates'


class SortOrder(_ParsableEnum):
    NONE = 'none'
    ASC = 'asc'
    DESC = 'desc'


class DateIndex(_ParsableEnum):
    YEAR = 'year'
    MONTH = 'month'
    DAY = 'day'
    HOUR = 'hour'
    MINUTE = 'minute'

    @property
    def rank(self):
        return _DATE_INDEX_RANK[self]


_DATE_INDEX_RANK = {index: rank for rank, index in enumerate(DateIndex)}


def is_date_index_sorted(date_index):
    """True when every entry is strictly finer than the one before it."""
    ranks = [index.rank for index in date_index]
    return all(a < b for a, b in zip(ranks, ranks[1:]))


@dataclass(frozen=True)
class PartialPagination:
    include: Optional[Include] = None
    per_page: Optional[int] = None
    permalink_suffix: Optional[str] = None
    order: Optional[SortOrder] = None
    sort_by: Optional[Tuple[str, ...]] = None
    date_index: Optional[Tuple[DateIndex, ...]] = None

    def merge(self, fallback):
        """Field-wise merge where values set on self win."""
        if fallback is None:
            return self
        values = {}
        for f in fields(self):
            mine = getattr(self, f.name)
            values[f.name] = mine if mine is not None else getattr(fallback, f.name)
        return PartialPagination(**values)

    @classmethod
    def with_defaults(cls):
        return cls(
            include=Include.NONE,
            per_page=DEFAULT_PER_PAGE,
            permalink_suffix=DEFAULT_PERMALINK_SUFFIX,
            order=SortOrder.DESC,
            sort_by=(DEFAULT_SORT,),
            date_index=(DateIndex.YEAR, DateIndex.MONTH),
        )

    @classmethod
    def from_dict(cls, data, source=None):
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError("pagination must be a mapping", source)
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigurationError(
                f"unknown pagination option(s): {', '.join(sorted(unknown))}", source)

        values = {}
        if data.get('include') is not None:
            values['include'] = Include.parse(data['include'], 'pagination include', source)
        if data.get('per_page') is not None:
            per_page = data['per_page']
            if isinstance(per_page, bool) or not isinstance(per_page, int):
                raise ConfigurationError(f"pagination per_page must be an integer, got '{per_page}'", source)
            values['per_page'] = per_page
        if data.get('permalink_suffix') is not None:
            values['permalink_suffix'] = str(data['permalink_suffix'])
        if data.get('order') is not None:
            values['order'] = SortOrder.parse(data['order'], 'pagination order', source)
        if data.get('sort_by') is not None:
            values['sort_by'] = tuple(str(key) for key in _as_list(data['sort_by']))
        if data.get('date_index') is not None:
            values['date_index'] = tuple(
                DateIndex.parse(index, 'pagination date_index', source)
                for index in _as_list(data['date_index']))
        return cls(**values)


def _as_list(value):
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@dataclass(frozen=True)
class PaginationConfig:
    include: Include
    per_page: int
    front_permalink: str
    permalink_suffix: str
    order: SortOrder
    sort_by: List[str]
    date_index: List[DateIndex]

    @classmethod
    def from_partial(cls, partial, permalink, source=None):
        """
        Resolve pagination for a document whose permalink template is
        `permalink`. Returns None when pagination is not enabled.
        """
        partial = (partial or PartialPagination()).merge(PartialPagination.with_defaults())
        if partial.include is Include.NONE:
            return None
        if not is_date_index_sorted(partial.date_index):
            raise ConfigurationError(
                "pagination date_index must be ordered from coarsest to finest "
                f"(got {', '.join(index.value for index in partial.date_index)})", source)
        if partial.per_page <= 0:
            raise ConfigurationError(
                f"pagination per_page must be positive, got {partial.per_page}", source)
        return cls(
            include=partial.include,
            per_page=partial.per_page,
            front_permalink=permalink,
            permalink_suffix=partial.permalink_suffix,
            order=partial.order,
            sort_by=list(partial.sort_by),
            date_index=list(partial.date_index),
        )
