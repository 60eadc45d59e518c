import sys
import time
import traceback
from functools import wraps
from typing import List, Dict, Any, Callable, Type

_registry: Dict[str, List[Dict[str, Any]]] = {
    'tests': [],
    'results': []
}

PASS_FACE = '(^ ω ^)'
FAIL_FACE = '(ﾉಥДಥ)ﾉ'
SUMMARY_FACE = '☆*:.｡.o(≧▽≦)o.｡.:*☆'


class _c:
    """color codes."""
    ok = '\033[92m'
    fail = '\033[91m'
    warn = '\033[93m'
    info = '\033[94m'
    grey = '\033[90m'
    reset = '\033[0m'


class SuiteAssertionError(AssertionError):
    """an assert_that failure, told apart from errors raised by the code under test."""
    pass


# --- public api ---

def test(description: str) -> Callable:
    """decorator to register a function as a test case."""

    def decorator(func: Callable) -> Callable:
        _registry['tests'].append({'func': func, 'description': description})

        @wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)

        return wrapper

    return decorator


def assert_that(condition: Any, message: str = "assertion failed") -> None:
    if not condition:
        raise SuiteAssertionError(message)


def assert_raises(error_type: Type[BaseException], func: Callable[[], Any], message: str = "") -> BaseException:
    """call func and require it to raise error_type; the caught error is returned for further checks."""
    try:
        func()
    except error_type as e:
        return e
    raise SuiteAssertionError(message or f"expected {error_type.__name__} to be raised")


def run(title: str = "test run", verbose: bool = False) -> int:
    """executes all registered tests, prints a report and returns the number of failures."""
    print(f"\n{_c.info}--- starting: {title} ---{_c.reset}")
    started = time.perf_counter()
    _registry['results'] = []

    for case in _registry['tests']:
        error = None
        try:
            case['func']()
        except SuiteAssertionError as e:
            error = f"assertion failed: {e}"
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            if verbose:
                traceback.print_exc()

        _registry['results'].append({'passed': error is None, 'description': case['description'], 'error': error})
        if error is None:
            print(f"  {_c.ok}✔ pass{_c.reset}  {PASS_FACE}  {case['description']}")
        else:
            print(f"  {_c.fail}✖ fail{_c.reset}  {FAIL_FACE}  {case['description']}")
            print(f"    {_c.grey}└─> {error}{_c.reset}")

    failed = _print_summary(started)
    # cleared so several suites can run from one script
    _registry['tests'] = []
    return failed


def main(title: str) -> None:
    """run the registered tests and exit non-zero on failure."""
    sys.exit(1 if run(title, verbose='-v' in sys.argv) else 0)


def _print_summary(started: float) -> int:
    duration = (time.perf_counter() - started) * 1000
    results = _registry['results']
    total = len(results)
    failed = sum(1 for r in results if not r['passed'])
    colour = _c.ok if failed == 0 else _c.fail

    print(f"\n{colour}--- summary ---{_c.reset}")
    print(f"  {SUMMARY_FACE}  ran {_c.info}{total}{_c.reset} tests in {_c.warn}{duration:.2f}ms{_c.reset}")
    print(f"  {_c.ok}passed: {total - failed}{_c.reset}, {_c.fail}failed: {failed}{_c.reset}")
    print(f"{colour}---------------{_c.reset}\n")
    return failed
