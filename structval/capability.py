# Copyright (c) 2025 The structval authors. MIT LICENSE.
#
# Capabilities
# ============
#
# Optional behaviours a host object can opt into by subclassing (or
# registering with) one of these classes. The structval functions check
# for them with isinstance and fall back to their generic behaviour when a
# capability is missing.
#
# - Container: keyed get/has/set/unset/keys hooks.
# - Dumpable: self-describing dump.
# - Equalable: custom equality.
# - Cursor: stateful rewind/valid/current/key/next iteration.
#
# Counting uses collections.abc.Sized (__len__) and cloning uses the copy
# protocol (__copy__), as Python already defines both.


from abc import ABC, abstractmethod
from typing import *


class Container(ABC):
    """
    Keyed accessor hooks for a host object.
    The set and unset defaults ignore the request, so a host that only
    implements get and has reads as a container but rejects writes.
    """

    @abstractmethod
    def get(self, name: Any) -> Any:
        ...

    @abstractmethod
    def has(self, name: Any) -> bool:
        ...

    def set(self, name: Any, value: Any) -> None:
        pass

    def unset(self, name: Any) -> None:
        pass

    def keys(self) -> List[Any]:
        "Public instance fields, in definition order."
        return [k for k in getattr(self, '__dict__', {}) if not k.startswith('_')]


class Dumpable(ABC):

    @abstractmethod
    def dump(self, indent: str, depth: int) -> str:
        """
        Dump the object. An empty indent means no pretty-printing.
        The trailing line-feed is added by the caller.
        """


class Equalable(ABC):

    @abstractmethod
    def equals(self, other: Any) -> bool:
        "Final verdict on equality with other."


class Cursor(ABC):
    "Stateful iteration: rewind, then read key/current while valid."

    @abstractmethod
    def rewind(self) -> None:
        ...

    @abstractmethod
    def valid(self) -> bool:
        ...

    @abstractmethod
    def current(self) -> Any:
        ...

    @abstractmethod
    def key(self) -> Any:
        ...

    @abstractmethod
    def next(self) -> None:
        ...


__all__ = [
    'Container',
    'Cursor',
    'Dumpable',
    'Equalable',
]
