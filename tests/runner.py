# Test runner that uses the test model in cases.json.

import os
import json
from types import SimpleNamespace
from typing import Any, Dict, Callable, TypedDict


NULLMARK = '__NULL__'  # Value is None
STRUCTMARK = '`$STRUCT`'  # Wrapped object is a struct
LISTMARK = '`$LIST`'  # Wrapped [key, value] pairs form a list with explicit keys


class RunPack(TypedDict):
    cases: Dict[str, Any]
    runset: Callable
    subject: Callable


def makeRunner(testfile: str, utility: Any):

    def runner(
        name: str,
    ) -> RunPack:
        cases = resolve_cases(name, testfile)
        subject = resolve_subject(name, utility)

        def runset(testcases, testsubject=None):
            for entry in testcases['set']:
                try:
                    res = (testsubject or subject)(*resolve_args(entry))
                    entry['res'] = res
                    check_result(entry, res, utility)

                except AssertionError as err:
                    # Propagate assertion errors with added context
                    raise AssertionError(
                        f"{str(err)}\n\nENTRY: {json.dumps(entry, indent=2, default=jsonfallback)}"
                    )

                except Exception:
                    # For other errors, include the full error stack
                    import traceback
                    raise AssertionError(
                        f"{traceback.format_exc()}\nENTRY: "+
                        f"{json.dumps(entry, indent=2, default=jsonfallback)}"
                    )

        runpack = {
            "cases": cases,
            "runset": runset,
            "subject": subject,
        }

        return runpack

    return runner


def resolve_cases(name: str, testfile: str) -> Dict[str, Any]:
    with open(os.path.join(os.path.dirname(__file__), testfile), 'r', encoding='utf-8') as f:
        alltests = json.load(f)

    if name in alltests:
        return alltests[name]

    return alltests


def resolve_subject(name: str, utility: Any):
    return getattr(utility, name, None)


def resolve_args(entry: Dict[str, Any]):
    if 'args' in entry:
        return [revive(arg) for arg in entry['args']]
    return [revive(entry.get('in'))]


def check_result(entry, res, utility):
    out = revive(entry.get('out', NULLMARK))

    # Compare result with expected output using strict deep equality
    if not utility.equal(out, res, True):
        raise AssertionError(
            f"Expected: {utility.dump(out, '')}, got: {utility.dump(res, '')}"
        )


def revive(obj):
    # Handle nulls
    if NULLMARK == obj:
        return None

    # Handle collections recursively
    elif isinstance(obj, list):
        return [revive(item) for item in obj]
    elif isinstance(obj, dict):
        if STRUCTMARK in obj:
            return SimpleNamespace(**{k: revive(v) for k, v in obj[STRUCTMARK].items()})
        if LISTMARK in obj:
            return {k: revive(v) for k, v in obj[LISTMARK]}
        return {k: revive(v) for k, v in obj.items()}

    # Return everything else unchanged
    return obj


def jsonfallback(obj):
    return f"<non-serializable: {type(obj).__name__}>"


# Export the necessary components
__all__ = [
    'LISTMARK',
    'NULLMARK',
    'STRUCTMARK',
    'makeRunner',
    'revive',
]
