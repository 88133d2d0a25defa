"""Cached dataset kinds and their snapshot shapes."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Type, Union

from registrant_reports.models.record import Row


@dataclass
class WrappedSnapshot:
    """Raw sheet snapshot tagged with its generation timestamp."""

    global_timestamp: str
    data: List[Row] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"global_timestamp": self.global_timestamp, "data": self.data}


@dataclass
class BareSnapshot:
    """Derived snapshot stored as a plain list of rows."""

    data: List[Row] = field(default_factory=list)

    def to_dict(self) -> List[Row]:
        return self.data


Snapshot = Union[WrappedSnapshot, BareSnapshot]


class Dataset(Enum):
    """Named datasets kept per enterprise, with file name and shape."""

    REGISTRANTS = ("registrants", "all-registrants-data.json", WrappedSnapshot)
    SUBMISSIONS = ("submissions", "all-submissions-data.json", WrappedSnapshot)
    REGISTRATIONS = ("registrations", "registrations.json", BareSnapshot)
    ENROLLMENTS = ("enrollments", "enrollments.json", BareSnapshot)
    CERTIFICATES = ("certificates", "certificates.json", BareSnapshot)

    def __init__(self, dataset_name: str, filename: str, shape: Type):
        self.dataset_name = dataset_name
        self.filename = filename
        self.shape = shape

    @property
    def is_wrapped(self) -> bool:
        return self.shape is WrappedSnapshot


DERIVED_DATASETS = (Dataset.REGISTRATIONS, Dataset.ENROLLMENTS, Dataset.CERTIFICATES)
