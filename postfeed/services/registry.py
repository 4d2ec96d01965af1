"""Named, schema-validated operations bound to the feed aggregator."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from postfeed.errors import OperationInputError, UnknownOperationError
from postfeed.models.feed import AggregationRequest, CanonicalPost
from postfeed.services.aggregator import FeedAggregator, keyword_filter
from postfeed.utils.text import excerpt

LOGGER = logging.getLogger(__name__)


Resolver = Callable[[Any], AggregationRequest]
Enhancer = Callable[[list[CanonicalPost], Any], list[CanonicalPost]]


class PostRecord(BaseModel):
    """Wire representation of a :class:`CanonicalPost`."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    link: str
    pubDate: str = ""
    source: str | None = Field(default=None, alias="_source")
    thumbnail: str | None = None


@dataclass(slots=True, frozen=True)
class OperationSpec:
    """Declarative description of one invocable aggregation operation."""

    name: str
    title: str
    description: str
    input_model: type[BaseModel]
    output_key: str
    resolve: Resolver
    enhance: Enhancer | None = None
    output_model: type[BaseModel] = field(init=False)

    def __post_init__(self) -> None:
        model = create_model(
            f"{self.input_model.__name__.removesuffix('Input')}Output",
            **{self.output_key: (list[PostRecord], ...)},
        )
        object.__setattr__(self, "output_model", model)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.input_model.model_json_schema(),
            "outputSchema": self.output_model.model_json_schema(),
        }


@dataclass(slots=True)
class OperationResult:
    """Structured and rendered output of a single operation call."""

    operation: str
    output_key: str
    records: list[CanonicalPost] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)
    source_errors: list[str] = field(default_factory=list)
    degraded: bool = False
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def structured_content(self) -> dict[str, list[dict[str, Any]]]:
        return {self.output_key: [record.to_payload() for record in self.records]}

    def to_tool_result(self) -> dict[str, Any]:
        """Return the result in the shape expected by tool-calling clients."""

        if self.error is not None:
            content = [{"type": "text", "text": self.error}]
        else:
            content = [{"type": "text", "text": text} for text in self.texts]
        return {
            "content": content,
            "structuredContent": self.structured_content,
            "isError": self.is_error,
        }


def render_post(post: CanonicalPost) -> str:
    """Return the short human-readable block shown for one post."""

    return f"{post.title}\n{excerpt(post.description)}\n{post.link}"


class OperationRegistry:
    """Hold the registered operations and dispatch calls to the aggregator."""

    def __init__(self, aggregator: FeedAggregator | None = None) -> None:
        self._aggregator = aggregator or FeedAggregator()
        self._operations: dict[str, OperationSpec] = {}
        self._resources: list[Any] = []

    def register(self, spec: OperationSpec) -> OperationSpec:
        if spec.name in self._operations:
            raise ValueError(f"Operation '{spec.name}' is already registered")
        self._operations[spec.name] = spec
        return spec

    def get(self, name: str) -> OperationSpec:
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def manage(self, resource: Any) -> Any:
        """Have :meth:`close` release ``resource`` along with the aggregator."""

        self._resources.append(resource)
        return resource

    def close(self) -> None:
        for resource in self._resources:
            resource.close()
        self._aggregator.close()

    @property
    def names(self) -> list[str]:
        return list(self._operations)

    def describe(self) -> list[dict[str, Any]]:
        return [spec.describe() for spec in self._operations.values()]

    def validate(self, spec: OperationSpec, arguments: Mapping[str, Any] | None) -> BaseModel:
        """Apply defaults and check ``arguments`` against the operation's input schema."""

        try:
            return spec.input_model.model_validate(dict(arguments or {}))
        except ValidationError as exc:
            raise OperationInputError(
                spec.name,
                exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

    def invoke(self, spec: OperationSpec, validated: BaseModel) -> OperationResult:
        """Run the aggregation configured for ``spec`` with already validated input."""

        request = spec.resolve(validated)
        aggregation = self._aggregator.aggregate(
            request.sources,
            request.count,
            predicate=keyword_filter(request.keyword),
            placeholder=request.placeholder,
        )
        records = list(aggregation.items)
        if spec.enhance is not None:
            records = spec.enhance(records, validated)

        payload = spec.output_model.model_validate(
            {spec.output_key: [record.to_payload() for record in records]}
        )
        LOGGER.debug("Operation %s output: %s", spec.name, payload.model_dump(by_alias=True))
        LOGGER.info(
            "Operation %s returned %d post(s) from %d source(s)",
            spec.name,
            len(records),
            len(request.sources),
        )
        return OperationResult(
            operation=spec.name,
            output_key=spec.output_key,
            records=records,
            texts=[render_post(record) for record in records],
            source_errors=list(aggregation.errors),
            degraded=aggregation.degraded,
        )

    def call(self, name: str, arguments: Mapping[str, Any] | None = None) -> OperationResult:
        """Validate ``arguments`` and invoke ``name``, reporting failures as error results.

        Raises :class:`UnknownOperationError` when ``name`` is not registered.
        """

        spec = self.get(name)
        try:
            validated = self.validate(spec, arguments)
        except OperationInputError as exc:
            LOGGER.warning(str(exc))
            return OperationResult(operation=name, output_key=spec.output_key, error=str(exc))

        try:
            return self.invoke(spec, validated)
        except Exception as exc:
            LOGGER.exception("Operation %s failed", name)
            return OperationResult(
                operation=name,
                output_key=spec.output_key,
                error=f"Error running {name}: {exc}",
            )
