"""Service base class."""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(kw_only_default=True)
class _ServiceMeta(type):
    """Metaclass that turns subclasses into keyword-only dataclasses."""

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls, kw_only=True)
        return cls


class Service(metaclass=_ServiceMeta):
    """Base class for domain services.

    Dependencies are declared as annotated fields and injected by keyword:

        class LinkLookup(Service):
            _repo: LinkRepository
            _cache: LinkCache

        LinkLookup(_repo=repo, _cache=cache)
    """

    pass
