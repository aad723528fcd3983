# Copyright (c) 2025 The structval authors. MIT LICENSE.
#
# Struct Value
# ============
#
# Utility functions to navigate and transform heterogeneous, dynamically
# shaped data: lists (dict, list, tuple), structs (SimpleNamespace), host
# objects that opt into capability hooks, and plain scalars.
#
# Main utilities
# - getpath: get the value at a key path, as a live reference.
# - setpath: set a value at a key path, creating containers on the way.
# - delpath: remove the value at a key path.
# - haspath: true if the last key of a path exists.
# - dump: human-friendly debug representation of any value.
# - equal: deep structural equality.
# - clone: depth-limited deep copy.
# - flatten: nested structure to a list of (path, leaf) pairs.
# - unflatten: list of (path, leaf) pairs back to a nested structure.
# - tolist, tostruct: depth-limited conversion between container kinds.
#
# Minor utilities
# - isnode, islist, isstruct, iskey, isfunc, isresource: identify value kinds.
# - typify: kind name of a value.
# - nodeof: empty container of a kind.
# - ja, jo: build a list or struct from arguments.
# - keysof: keys of a node, in insertion order.
# - haskey: true if a key exists (even if its value is None).
# - getprop, setprop, delprop: single key access.
# - size: length of strings, nodes and iterables.
# - items: lazy (key, value) pairs of any value.
# - strkey: string form of a key.
# - pathify: printable form of a path.
#
# None of these functions raise for bad paths, rejected writes or missing
# capabilities: failure is reported as False, None or a no-op.


from typing import *
from types import SimpleNamespace
from collections.abc import Iterable, Mapping, Sized
import copy
import functools
import inspect
import io
import logging
import re
import socket
import sys

from .capability import Container, Cursor, Dumpable, Equalable


logger = logging.getLogger(__name__)


# Canonical decimal integer, as used for list indexes.
R_INTEGER_KEY = re.compile(r'0|-?[1-9][0-9]*')

# Kind names.
S_null = 'null'
S_boolean = 'boolean'
S_integer = 'integer'
S_float = 'float'
S_string = 'string'
S_resource = 'resource'
S_callable = 'callable'
S_list = 'list'
S_struct = 'struct'
S_opaque = 'opaque'

# General strings.
S_MT = ''
S_DT = '.'
S_CM = ','
S_SP = ' '
S_LF = '\n'
S_QT = "'"
S_ARROW = ' => '
S_OPEN = '['
S_CLOSE = ']'
S_STRUCTMARK = '(struct) '
S_true = 'true'
S_false = 'false'
S_stream = 'stream'
S_socket = 'socket'

# Defaults.
DEFAULT_INDENT = '\t'
MAXDEPTH = sys.maxsize
RESOURCE_TYPES = (io.IOBase, socket.socket)


# The standard undefined value for this language.
UNDEF = None

# Marks a key that is not present, as distinct from a None value.
_MISSING = object()

_STRING_ESCAPES = {
    '\\': '\\\\',
    S_QT: "\\'",
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}


def isnode(val: Any = UNDEF) -> bool:
    "Value is a node - a list, a struct, or a host Container."
    return islist(val) or isstruct(val) or isinstance(val, Container)


def islist(val: Any = UNDEF) -> bool:
    "Value is a list: a dict with int or str keys, or a list or tuple with index keys."
    return isinstance(val, (dict, list, tuple))


def isstruct(val: Any = UNDEF) -> bool:
    "Value is a struct (property bag) with string keys."
    return isinstance(val, SimpleNamespace)


def iskey(key: Any = UNDEF) -> bool:
    "Value is a string or integer key."
    # Exclude bool (which is a subclass of int)
    if isinstance(key, bool):
        return False
    return isinstance(key, (str, int))


def isfunc(val: Any = UNDEF) -> bool:
    "Value is a function, method or partial."
    return inspect.isroutine(val) or isinstance(val, functools.partial)


def isresource(val: Any = UNDEF) -> bool:
    "Value is an identity-only handle such as a stream or socket."
    return isinstance(val, RESOURCE_TYPES)


def typify(val: Any = UNDEF) -> str:
    if val is UNDEF:
        return S_null
    if isinstance(val, bool):
        return S_boolean
    if isinstance(val, int):
        return S_integer
    if isinstance(val, float):
        return S_float
    if isinstance(val, str):
        return S_string
    if islist(val):
        return S_list
    if isstruct(val):
        return S_struct
    if isresource(val):
        return S_resource
    if isfunc(val):
        return S_callable
    return S_opaque


def nodeof(kind: str = S_list) -> Any:
    "Create an empty node of the given kind."
    return SimpleNamespace() if S_struct == kind else {}


def ja(*v: Any) -> List[Any]:
    "Define a list using function arguments."
    return list(v)


def jo(*kv: Any) -> SimpleNamespace:
    """
    Define a struct using function arguments.
    Arguments are treated as key-value pairs.
    """
    o = SimpleNamespace()
    for i in range(0, len(kv), 2):
        setattr(o, strkey(kv[i]), kv[i + 1] if i + 1 < len(kv) else UNDEF)
    return o


def strkey(key: Any = UNDEF) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool) or not isinstance(key, int):
        return S_MT
    return str(key)


def pathify(val: Any = UNDEF) -> str:
    path = _topath(val)
    if path is UNDEF:
        return '<unknown-path:' + type(val).__name__ + '>'
    if 0 == len(path):
        return '<root>'
    return S_DT.join(strkey(p).replace(S_DT, S_MT) for p in path)


def _isopaque(val: Any) -> bool:
    return S_opaque == typify(val)


def _identical(a: Any, b: Any) -> bool:
    "Same object, or same-type scalars with the same value."
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    return isinstance(a, (bool, int, float, str, bytes)) and a == b


def _hook(fn: Callable, *args: Any, alt: Any = UNDEF) -> Any:
    "Call a host capability hook. A hook that raises counts as a refusal."
    try:
        return fn(*args)
    except Exception as err:
        logger.debug(f'Capability hook {fn.__qualname__} failed: {err!r}')
        return alt


def _fields(val: Any) -> Dict[str, Any]:
    "Public instance fields of a plain object."
    try:
        attrs = dict(vars(val))
    except TypeError:
        slots = getattr(type(val), '__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        attrs = {name: getattr(val, name) for name in slots if hasattr(val, name)}
    return {k: v for k, v in attrs.items() if isinstance(k, str) and not k.startswith('_')}


def _dictkey(val: Dict[Any, Any], key: Any) -> Any:
    "Stored form of key in a dict; an int and its decimal string stand in for each other."
    if key in val:
        return key
    if isinstance(key, int):
        alt = str(key)
    elif R_INTEGER_KEY.fullmatch(key):
        alt = int(key)
    else:
        return _MISSING
    return alt if alt in val else _MISSING


def _listindex(key: Any) -> Any:
    if isinstance(key, str) and R_INTEGER_KEY.fullmatch(key):
        key = int(key)
    if isinstance(key, int) and 0 <= key:
        return key
    return _MISSING


def _topath(path: Any) -> Optional[List[Any]]:
    if path is UNDEF:
        return []
    if isinstance(path, (list, tuple)):
        return list(path)
    if iskey(path):
        return [path]
    return UNDEF


def _hashable(key: Any) -> bool:
    try:
        hash(key)
    except TypeError:
        return False
    return True


def _getexact(node: Any, key: Any) -> Any:
    "getprop, except that dict keys are matched as given, with no int/str stand-in."
    if isinstance(node, dict):
        return node.get(key, _MISSING) if _hashable(key) else _MISSING
    return getprop(node, key, _MISSING)


def _setexact(parent: Any, key: Any, val: Any) -> bool:
    "setprop, except that dicts store the key as given, so 1 and '1' stay apart."
    if isinstance(parent, dict) and _hashable(key):
        parent[key] = val
        return True
    return setprop(parent, key, val)


def haskey(val: Any = UNDEF, key: Any = UNDEF) -> bool:
    "Key exists in node val. A key holding None still exists."
    if not iskey(key):
        return False

    if isinstance(val, dict):
        return _dictkey(val, key) is not _MISSING

    if isinstance(val, (list, tuple)):
        index = _listindex(key)
        return index is not _MISSING and index < len(val)

    if isstruct(val):
        return strkey(key) in vars(val)

    if isinstance(val, Container):
        return bool(_hook(val.has, key, alt=False))

    if _isopaque(val):
        return strkey(key) in _fields(val)

    return False


def getprop(val: Any = UNDEF, key: Any = UNDEF, alt: Any = UNDEF) -> Any:
    """
    Safely get a property of a node. The stored object is returned, not a copy.
    If the key is not found, return the alternative value.
    """
    if not iskey(key):
        return alt

    if isinstance(val, dict):
        skey = _dictkey(val, key)
        return alt if skey is _MISSING else val[skey]

    if isinstance(val, (list, tuple)):
        index = _listindex(key)
        if index is _MISSING or len(val) <= index:
            return alt
        return val[index]

    if isstruct(val):
        return vars(val).get(strkey(key), alt)

    if isinstance(val, Container):
        if not _hook(val.has, key, alt=False):
            return alt
        return _hook(val.get, key, alt=alt)

    if _isopaque(val):
        return _fields(val).get(strkey(key), alt)

    return alt


def setprop(parent: Any, key: Any, val: Any) -> bool:
    """
    Safely set a property on a node.
    - For dicts, an existing key keeps its position.
    - For lists, key == len(list) -> append; other keys past the end are rejected.
    - Tuples and plain objects reject every write.
    Returns True if reading the key back gives val.
    """
    if not iskey(key):
        return False

    if isinstance(parent, dict):
        skey = _dictkey(parent, key)
        parent[key if skey is _MISSING else skey] = val

    elif isinstance(parent, list):
        index = _listindex(key)
        if index is _MISSING or len(parent) < index:
            logger.debug(f'List write rejected for key {key!r}, length {len(parent)}')
            return False
        if index == len(parent):
            parent.append(val)
        else:
            parent[index] = val

    elif isstruct(parent):
        setattr(parent, strkey(key), val)

    elif isinstance(parent, Container):
        _hook(parent.set, key, val)

    else:
        logger.debug(f'Write rejected for key {key!r} on read-only {typify(parent)} value')
        return False

    # Hosts may ignore or transform the write.
    return _identical(getprop(parent, key, _MISSING), val)


def delprop(parent: Any, key: Any) -> bool:
    """
    Remove a property from a node.
    For lists, only the last element can be removed, as removing any
    other would shift the keys of later elements.
    Returns True if the key no longer exists.
    """
    if not iskey(key):
        return False

    if isinstance(parent, dict):
        skey = _dictkey(parent, key)
        if skey is not _MISSING:
            del parent[skey]

    elif isinstance(parent, list):
        if _listindex(key) == len(parent) - 1:
            parent.pop()

    elif isstruct(parent):
        vars(parent).pop(strkey(key), UNDEF)

    elif isinstance(parent, Container):
        _hook(parent.unset, key)

    removed = not haskey(parent, key)
    if not removed:
        logger.debug(f'Removal of key {key!r} not honoured by {typify(parent)} value')
    return removed


def keysof(val: Any = UNDEF) -> List[Any]:
    "Keys of a node in insertion order, or the public fields of an object."
    if isinstance(val, dict):
        return list(val.keys())
    if isinstance(val, (list, tuple)):
        return list(range(len(val)))
    if isstruct(val):
        return list(vars(val).keys())
    if isinstance(val, Container):
        return list(_hook(val.keys, alt=[]))
    if _isopaque(val):
        return list(_fields(val).keys())
    return []


def getpath(store: Any, path: Any = UNDEF, alt: Any = UNDEF) -> Any:
    """
    Get a value from the store using a path (a list of keys, or a single key).
    The result is the live object inside store, so changes made through it
    are visible in store. An empty path returns the store itself.
    """
    parts = _topath(path)
    if parts is UNDEF:
        return alt

    val = store
    for part in parts:
        val = getprop(val, part, _MISSING)
        if val is _MISSING:
            return alt

    return val


def haspath(store: Any, path: Any) -> bool:
    "The last key of path exists in the node found at the rest of the path."
    parts = _topath(path)
    if not parts:
        return False

    parent = getpath(store, parts[:-1], _MISSING)
    return parent is not _MISSING and haskey(parent, parts[-1])


def setpath(store: Any, path: Any, val: Any, kind: str = S_list) -> bool:
    """
    Set a value in the store using a path.
    Missing or non-node values along the path are replaced with new
    empty nodes of the given kind.
    """
    parts = _topath(path)
    if not parts:
        return False

    return _setparts(store, parts, val, kind, False)


def _setparts(store: Any, parts: List[Any], val: Any, kind: str, exact: bool) -> bool:
    get = _getexact if exact else getprop
    put = _setexact if exact else setprop

    parent = store
    for part in parts[:-1]:
        child = get(parent, part)
        if not isnode(child):
            child = nodeof(kind)
            if not put(parent, part, child):
                logger.debug(f'Cannot create {kind} at {pathify(parts)}, stopped at {part!r}')
                return False
        parent = child

    return put(parent, parts[-1], val)


def delpath(store: Any, path: Any) -> bool:
    """
    Remove the value at path. An unreachable parent means the key is
    already absent, which counts as success.
    """
    parts = _topath(path)
    if not parts:
        return False

    parent = getpath(store, parts[:-1], _MISSING)
    if parent is _MISSING:
        return True

    return delprop(parent, parts[-1])


def items(val: Any = UNDEF) -> Iterator[Tuple[Any, Any]]:
    """
    Iterate any value as (key, value) pairs, lazily.
    Cursors and iterators are consumed as they go, so infinite ones work
    as long as the caller stops.
    """
    if isinstance(val, Cursor):
        return _cursoritems(val)
    if isinstance(val, (str, list, tuple)):
        return enumerate(val)
    if isinstance(val, (dict, Mapping)):
        return iter(val.items())
    if isstruct(val):
        return iter(vars(val).items())
    if isinstance(val, Container):
        return ((key, getprop(val, key)) for key in keysof(val))
    if isresource(val) or isfunc(val):
        return iter(())
    if isinstance(val, Iterable):
        return enumerate(val)
    if _isopaque(val):
        return iter(_fields(val).items())
    return iter(())


def _cursoritems(cursor: Cursor) -> Iterator[Tuple[Any, Any]]:
    cursor.rewind()
    while cursor.valid():
        yield cursor.key(), cursor.current()
        cursor.next()


def size(val: Any = UNDEF) -> int:
    """Determine the size of a value (length for strings and lists, count for others)"""
    if val is UNDEF or isinstance(val, (bool, int, float)) or isresource(val) or isfunc(val):
        return 0
    if isinstance(val, (str, Sized)):
        return len(val)
    if isstruct(val):
        return len(vars(val))
    if isinstance(val, (Cursor, Iterable)) and not isinstance(val, Container):
        return sum(1 for _ in items(val))
    return len(keysof(val))


def dump(val: Any = UNDEF, indent: str = DEFAULT_INDENT, depth: int = 0) -> str:
    """
    Human-friendly representation of a value (NOT a parseable format!).
    A non-empty indent gives multi-line output ending with a line-feed,
    an empty indent gives a single line with no line-feed.
    """
    lf = S_LF if indent else S_MT

    if isinstance(val, Dumpable):
        return val.dump(indent, depth) + lf

    if islist(val) or isstruct(val):
        return _dumpnode(val, indent, depth) + lf

    if isfunc(val):
        return _dumpfunc(val) + lf

    if isresource(val):
        kind = S_socket if isinstance(val, socket.socket) else S_stream
        return 'resource#' + str(id(val)) + '(' + kind + ')' + lf

    if _isopaque(val):
        return 'object#' + str(id(val)) + '(' + _typename(val) + ')' + lf

    return _dumpscalar(val) + lf


def _dumpnode(val: Any, indent: str, depth: int) -> str:
    prefix = S_STRUCTMARK if isstruct(val) else S_MT
    entries = []

    # Keys are shown from the first break in the 0, 1, 2, ... run onwards.
    elide = True
    for key, child in items(val):
        elide = elide and iskey(key) and isinstance(key, int) and key == len(entries)
        text = dump(child, indent, depth + 1)
        if indent:
            text = text[:-1]
        entries.append(text if elide else _dumpscalar(key) + S_ARROW + text)

    if 0 == len(entries):
        return prefix + S_OPEN + S_CLOSE

    if indent:
        pad = S_LF + indent * (depth + 1)
        return (prefix + S_OPEN + pad + (S_CM + pad).join(entries) +
                S_LF + indent * depth + S_CLOSE)

    return prefix + S_OPEN + (S_CM + S_SP).join(entries) + S_CLOSE


def _dumpfunc(val: Any) -> str:
    out = 'callable#' + str(id(val))
    func = val.func if isinstance(val, functools.partial) else val
    code = getattr(getattr(func, '__func__', func), '__code__', UNDEF)
    if code is not UNDEF:
        out += '(' + code.co_filename + ':' + str(code.co_firstlineno) + ')'
    return out


def _dumpscalar(val: Any) -> str:
    if val is UNDEF:
        return S_null
    if isinstance(val, bool):
        return S_true if val else S_false
    if isinstance(val, str):
        return S_QT + ''.join(_STRING_ESCAPES.get(c, c) for c in val) + S_QT
    return repr(val)


def _typename(val: Any) -> str:
    cls = type(val)
    if 'builtins' == cls.__module__:
        return cls.__qualname__
    return cls.__module__ + S_DT + cls.__qualname__


def equal(a: Any, b: Any, strict: bool = False) -> bool:
    """
    Deep structural equality.
    Non-strict comparison treats a list and a struct with the same entries
    as equal. A missing key and a key holding None compare equal.
    """
    if _identical(a, b):
        return True

    # The first argument's hook wins.
    if isinstance(a, Equalable):
        return bool(_hook(a.equals, b, alt=False))
    if isinstance(b, Equalable):
        return bool(_hook(b.equals, a, alt=False))

    if not isnode(a) or not isnode(b):
        return False

    if strict and typify(a) != typify(b):
        return False

    if size(a) != size(b):
        return False

    # Strict comparison of two dicts matches keys as stored, so 1 and '1' differ.
    # Dict keys that are not int or str are always matched as stored.
    exact = strict and isinstance(a, dict)
    for key, val in items(a):
        if isinstance(b, dict) and (exact or not iskey(key)):
            other = _getexact(b, key)
        else:
            other = getprop(b, key)
        if not equal(val, UNDEF if other is _MISSING else other, strict):
            return False

    return True


def clone(val: Any = UNDEF, depth: int = MAXDEPTH) -> Any:
    """
    Clone a data structure down to the given depth.
    At depth 0 (or below) the value itself is returned, not a copy.
    NOTE: functions and resources are shared, *not* cloned. Host objects
    are copied only if their type defines __copy__.
    """
    if depth <= 0:
        return val

    if islist(val) or isstruct(val):
        out = [] if isinstance(val, (list, tuple)) else nodeof(typify(val))
        for key, child in items(val):
            _setexact(out, key, clone(child, depth - 1))
        return tuple(out) if isinstance(val, tuple) else out

    if _isopaque(val) and hasattr(type(val), '__copy__'):
        return copy.copy(val)

    return val


def flatten(val: Any = UNDEF) -> List[Tuple[List[Any], Any]]:
    """
    List the leaves of a structure as (path, value) pairs, depth first.
    Empty nodes are leaves, so that unflatten can rebuild them.
    """
    out = []
    for key, child in items(val):
        if isnode(child) and 0 < size(child):
            out.extend(([key] + path, leaf) for path, leaf in flatten(child))
        else:
            out.append(([key], child))
    return out


def unflatten(entries: Iterable, kind: str = S_list) -> Any:
    """
    Build a structure from (path, value) pairs. Later pairs win.
    Dict keys are stored exactly as the paths give them.
    """
    out = nodeof(kind)
    for path, val in entries:
        parts = _topath(path)
        if parts:
            _setparts(out, parts, val, kind, True)
    return out


def tolist(val: Any, depth: int = MAXDEPTH) -> Any:
    "Recursively convert a structure to lists (dicts), down to depth."
    return _convert(S_list, val, depth)


def tostruct(val: Any, depth: int = MAXDEPTH) -> Any:
    "Recursively convert a structure to structs, down to depth."
    return _convert(S_struct, val, depth)


def _convert(kind: str, val: Any, depth: int) -> Any:
    if not isnode(val) and not _isopaque(val):
        return val

    depth = max(depth, 1)
    out = nodeof(kind)
    for key, child in items(val):
        if 1 < depth and (isnode(child) or _isopaque(child)):
            child = _convert(kind, child, depth - 1)
        _setexact(out, key, child)
    return out


# Create a StructUtility class with all utility functions as attributes
class StructUtility:
    def __init__(self):
        self.clone = clone
        self.delpath = delpath
        self.delprop = delprop
        self.dump = dump
        self.equal = equal
        self.flatten = flatten
        self.getpath = getpath
        self.getprop = getprop
        self.haskey = haskey
        self.haspath = haspath
        self.isfunc = isfunc
        self.iskey = iskey
        self.islist = islist
        self.isnode = isnode
        self.isresource = isresource
        self.isstruct = isstruct
        self.items = items
        self.ja = ja
        self.jo = jo
        self.keysof = keysof
        self.nodeof = nodeof
        self.pathify = pathify
        self.setpath = setpath
        self.setprop = setprop
        self.size = size
        self.strkey = strkey
        self.tolist = tolist
        self.tostruct = tostruct
        self.typify = typify
        self.unflatten = unflatten


__all__ = [
    'StructUtility',
    'clone',
    'delpath',
    'delprop',
    'dump',
    'equal',
    'flatten',
    'getpath',
    'getprop',
    'haskey',
    'haspath',
    'isfunc',
    'iskey',
    'islist',
    'isnode',
    'isresource',
    'isstruct',
    'items',
    'ja',
    'jo',
    'keysof',
    'nodeof',
    'pathify',
    'setpath',
    'setprop',
    'size',
    'strkey',
    'tolist',
    'tostruct',
    'typify',
    'unflatten',
]
