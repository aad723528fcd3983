# structval init

from .structval import (
    DEFAULT_INDENT,
    MAXDEPTH,
    S_list,
    S_struct,
    StructUtility,
    clone,
    delpath,
    delprop,
    dump,
    equal,
    flatten,
    getpath,
    getprop,
    haskey,
    haspath,
    isfunc,
    iskey,
    islist,
    isnode,
    isresource,
    isstruct,
    items,
    ja,
    jo,
    keysof,
    nodeof,
    pathify,
    setpath,
    setprop,
    size,
    strkey,
    tolist,
    tostruct,
    typify,
    unflatten,
)

from .capability import (
    Container,
    Cursor,
    Dumpable,
    Equalable,
)


__all__ = [
    'Container',
    'Cursor',
    'DEFAULT_INDENT',
    'Dumpable',
    'Equalable',
    'MAXDEPTH',
    'S_list',
    'S_struct',
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
