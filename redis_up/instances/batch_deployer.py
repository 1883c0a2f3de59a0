"""Batch deployment from a YAML document."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Callable, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.enums import InstanceKind
from ..core.errors import ConfigFormatError, RedisUpError
from ..core.log import Logger, log_event
from ..core.types import (
    BasicOptions,
    ClusterOptions,
    EnterpriseOptions,
    InstanceDescriptor,
    SentinelOptions,
    StackOptions,
    StartOptions,
)
from ..utils.filesystem import read_text
from .orchestrator import DeploymentOrchestrator

SUPPORTED_API_VERSION = "v1"


def _kebab(field_name: str) -> str:
    return field_name.replace("_", "-")


_ENTRY_CONFIG = ConfigDict(alias_generator=_kebab, populate_by_name=True, extra="forbid")


class _Entry(BaseModel):
    """Document entry; fields are spelled in kebab-case."""

    model_config = _ENTRY_CONFIG

    name: str

    @property
    def kind(self) -> InstanceKind:
        return InstanceKind(self.type)

    def to_options(self) -> StartOptions:
        options_class = next(
            base for base in type(self).__mro__ if base in _OPTION_CLASSES
        )
        return options_class(**self.model_dump(exclude={"type"}))


class BasicEntry(_Entry, BasicOptions):
    model_config = _ENTRY_CONFIG

    type: Literal["basic"]
    name: str


class StackEntry(_Entry, StackOptions):
    model_config = _ENTRY_CONFIG

    type: Literal["stack"]
    name: str


class ClusterEntry(_Entry, ClusterOptions):
    model_config = _ENTRY_CONFIG

    type: Literal["cluster"]
    name: str
    replicas: int = Field(default=1, ge=0)


class SentinelEntry(_Entry, SentinelOptions):
    model_config = _ENTRY_CONFIG

    type: Literal["sentinel"]
    name: str


class EnterpriseEntry(_Entry, EnterpriseOptions):
    model_config = _ENTRY_CONFIG

    type: Literal["enterprise"]
    name: str
    create_db: Optional[str] = "mydb"


_OPTION_CLASSES = (BasicOptions, StackOptions, ClusterOptions, SentinelOptions, EnterpriseOptions)

DeploymentEntry = Annotated[
    Union[BasicEntry, StackEntry, ClusterEntry, SentinelEntry, EnterpriseEntry],
    Field(discriminator="type"),
]


class BatchDocument(BaseModel):
    """Ordered list of deployments to create."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    api_version: str = Field(default=SUPPORTED_API_VERSION, alias="api-version")
    deployments: List[DeploymentEntry] = Field(default_factory=list)


def parse_document(text: str, source: str = "<string>") -> BatchDocument:
    """Parse and validate a batch document.

    The api-version is checked before the entries, so documents written for
    a newer schema are reported as such rather than as field errors.

    Raises:
        ConfigFormatError: On YAML errors, an unsupported version or schema violations
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigFormatError(f"{source} is not valid YAML: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigFormatError(f"{source} must contain a mapping at the top level")

    version = raw.get("api-version", SUPPORTED_API_VERSION)
    if version != SUPPORTED_API_VERSION:
        raise ConfigFormatError(
            f"Unsupported api-version '{version}' in {source}, "
            f"expected '{SUPPORTED_API_VERSION}'"
        )

    try:
        return BatchDocument.model_validate(raw)
    except ValidationError as e:
        raise ConfigFormatError(f"Invalid deployment document {source}: {e}") from e


def load_document(path: Path) -> BatchDocument:
    path = Path(path)
    return parse_document(read_text(path), source=str(path))


@dataclass
class DeploymentOutcome:
    """Result of one batch entry."""

    name: str
    kind: InstanceKind
    descriptor: Optional[InstanceDescriptor] = None
    error: Optional[RedisUpError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    outcomes: List[DeploymentOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded


class BatchDeployer:
    """Deploys document entries in order, continuing past failures."""

    def __init__(self, orchestrator: DeploymentOrchestrator, logger: Logger) -> None:
        self._orchestrator = orchestrator
        self._logger = logger

    def deploy(
        self,
        document: BatchDocument,
        on_outcome: Optional[Callable[[DeploymentOutcome], None]] = None,
    ) -> BatchReport:
        report = BatchReport()
        for entry in document.deployments:
            outcome = DeploymentOutcome(name=entry.name, kind=entry.kind)
            try:
                outcome.descriptor = self._orchestrator.start(entry.kind, entry.to_options())
            except RedisUpError as e:
                outcome.error = e
                self._logger.info("Deployment %s failed: %s", entry.name, e.message)
            report.outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(outcome)

        log_event(
            self._logger,
            "deploy",
            f"Batch finished: {report.succeeded} succeeded, {report.failed} failed",
            succeeded=report.succeeded,
            failed=report.failed,
        )
        return report

    def deploy_file(
        self,
        path: Path,
        on_outcome: Optional[Callable[[DeploymentOutcome], None]] = None,
    ) -> BatchReport:
        return self.deploy(load_document(path), on_outcome)
