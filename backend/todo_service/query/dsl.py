"""Typed Elasticsearch query and aggregation fragments.

Each variant knows how to render itself with ``to_dict()`` so builders work on
values instead of nested dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

RangeValue = Union[str, datetime]


def _render(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class Query:
    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class MatchAll(Query):
    def to_dict(self) -> Dict[str, Any]:
        return {"match_all": {}}


@dataclass(frozen=True)
class Term(Query):
    field: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"term": {self.field: _render(self.value)}}


@dataclass(frozen=True)
class Terms(Query):
    field: str
    values: Sequence[Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"terms": {self.field: [_render(value) for value in self.values]}}


@dataclass(frozen=True)
class Range(Query):
    field: str
    gte: Optional[RangeValue] = None
    lte: Optional[RangeValue] = None
    gt: Optional[RangeValue] = None
    lt: Optional[RangeValue] = None

    def to_dict(self) -> Dict[str, Any]:
        bounds = {
            name: _render(value)
            for name, value in (("gte", self.gte), ("lte", self.lte), ("gt", self.gt), ("lt", self.lt))
            if value is not None
        }
        return {"range": {self.field: bounds}}


@dataclass(frozen=True)
class Exists(Query):
    field: str

    def to_dict(self) -> Dict[str, Any]:
        return {"exists": {"field": self.field}}


@dataclass(frozen=True)
class MultiMatch(Query):
    query: str
    fields: Sequence[str]
    type: str = "best_fields"
    fuzziness: Optional[str] = "AUTO"

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"query": self.query, "fields": list(self.fields), "type": self.type}
        if self.fuzziness:
            body["fuzziness"] = self.fuzziness
        return {"multi_match": body}


@dataclass(frozen=True)
class Bool(Query):
    must: List[Query] = field(default_factory=list)
    filter: List[Query] = field(default_factory=list)
    must_not: List[Query] = field(default_factory=list)
    should: List[Query] = field(default_factory=list)
    minimum_should_match: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        for name, clauses in (
            ("must", self.must),
            ("filter", self.filter),
            ("must_not", self.must_not),
            ("should", self.should),
        ):
            if clauses:
                body[name] = [clause.to_dict() for clause in clauses]
        if self.minimum_should_match is not None:
            body["minimum_should_match"] = self.minimum_should_match
        return {"bool": body}


class Aggregation:
    aggs: Dict[str, "Aggregation"]

    def _body(self) -> Dict[str, Any]:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        rendered = self._body()
        if self.aggs:
            rendered["aggs"] = render_aggregations(self.aggs)
        return rendered


@dataclass(frozen=True)
class TermsAgg(Aggregation):
    field: str
    size: int = 10
    aggs: Dict[str, Aggregation] = field(default_factory=dict)

    def _body(self) -> Dict[str, Any]:
        return {"terms": {"field": self.field, "size": self.size}}


@dataclass(frozen=True)
class DateHistogramAgg(Aggregation):
    field: str
    calendar_interval: str
    format: Optional[str] = None
    min_doc_count: int = 0
    aggs: Dict[str, Aggregation] = field(default_factory=dict)

    def _body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "field": self.field,
            "calendar_interval": self.calendar_interval,
            "min_doc_count": self.min_doc_count,
        }
        if self.format:
            body["format"] = self.format
        return {"date_histogram": body}


@dataclass(frozen=True)
class FilterAgg(Aggregation):
    filter: Query
    aggs: Dict[str, Aggregation] = field(default_factory=dict)

    def _body(self) -> Dict[str, Any]:
        return {"filter": self.filter.to_dict()}


@dataclass(frozen=True)
class MissingAgg(Aggregation):
    field: str
    aggs: Dict[str, Aggregation] = field(default_factory=dict)

    def _body(self) -> Dict[str, Any]:
        return {"missing": {"field": self.field}}


def render_aggregations(aggs: Dict[str, Aggregation]) -> Dict[str, Any]:
    return {name: agg.to_dict() for name, agg in aggs.items()}
