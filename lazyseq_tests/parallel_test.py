import threading
import suite
from collections import Counter
from functools import wraps
from lazyseq import from_collection, from_range, iterate, of, configure, reset_config, SequenceState
from lazyseq.parallel import get_pool, chunked, segment, in_worker
from lazyseq.types import Stage

test = suite.test
assert_that = suite.assert_that
assert_raises = suite.assert_raises

numbers = list(range(1000))


def small_chunks(func):
    """run the test with several small chunks per wave, then restore the defaults"""
    @wraps(func)
    def wrapper():
        configure(max_workers=4, chunk_size=8)
        try:
            func()
        finally:
            reset_config()
    return wrapper


@test("parallel for_each visits every element exactly once")
@small_chunks
def test_parallel_for_each_exactly_once():
    visits = Counter()
    lock = threading.Lock()

    def visit(x):
        with lock:
            visits[x] += 1

    from_collection(numbers).parallel().for_each(visit)
    assert_that(set(visits) == set(numbers), "every element visited")
    assert_that(all(n == 1 for n in visits.values()), "no element visited twice")


@test("parallel for_each runs on the worker pool")
@small_chunks
def test_parallel_for_each_threads():
    names = set()
    lock = threading.Lock()

    def record(_):
        with lock:
            names.add(threading.current_thread().name)

    from_collection(numbers).parallel().for_each(record)
    assert_that(all(name.startswith('lazyseq-worker') for name in names), f"worker threads: {names}")


@test("parallel for_each_ordered keeps encounter order")
@small_chunks
def test_parallel_for_each_ordered():
    seen = []
    from_collection(numbers).parallel().map(lambda x: x + 1).for_each_ordered(seen.append)
    assert_that(seen == [x + 1 for x in numbers], "ordered visits")


@test("parallel collect keeps encounter order")
@small_chunks
def test_parallel_collect_order():
    result = from_collection(numbers).parallel().map(lambda x: x * 2).filter(lambda x: x % 3 == 0).collect(list)
    assert_that(result == [x * 2 for x in numbers if (x * 2) % 3 == 0], "same as sequential")


@test("parallel aggregations match sequential ones")
@small_chunks
def test_parallel_aggregations():
    add = lambda a, b: a + b
    assert_that(from_collection(numbers).parallel().count() == 1000, "count")
    assert_that(from_collection(numbers).parallel().reduce(add).get() == sum(numbers), "reduce")
    assert_that(from_collection(numbers).parallel().reduce(add, 0) == sum(numbers), "reduce with identity")
    assert_that(from_collection(numbers).parallel().sum() == sum(numbers), "sum")
    assert_that(from_collection(numbers).parallel().average().get() == sum(numbers) / 1000, "average")
    assert_that(from_collection(numbers).parallel().min().get() == 0, "min")
    assert_that(from_collection(numbers).parallel().max().get() == 999, "max")
    assert_that(of().parallel().reduce(add).is_empty, "reduce of empty")


@test("parallel reduce with sum and product over 1..5")
@small_chunks
def test_parallel_reduce_small():
    assert_that(from_range(1, 6).parallel().reduce(lambda a, b: a + b).get() == 15, "sum")
    assert_that(from_range(1, 6).parallel().reduce(lambda a, b: a * b).get() == 120, "product")


@test("parallel min and max keep the first of tied elements")
@small_chunks
def test_parallel_ties():
    # ties sit in different chunks
    data = [(i, 5 if i in (3, 20, 40) else 9) for i in range(48)]
    low = from_collection(data).parallel().min(key=lambda p: p[1]).get()
    assert_that(low == (3, 5), f"first minimum: {low}")
    high = from_collection(data).parallel().max(key=lambda p: p[1]).get()
    assert_that(high == (0, 9), f"first maximum: {high}")


@test("parallel find_first is deterministic")
@small_chunks
def test_parallel_find_first():
    for _ in range(5):
        found = from_collection(numbers).parallel().filter(lambda x: x % 7 == 3 and x > 100).find_first()
        assert_that(found.get() == 101, f"first match: {found}")


@test("parallel find_any returns a match")
@small_chunks
def test_parallel_find_any():
    found = from_collection(numbers).parallel().filter(lambda x: x % 100 == 0).find_any().get()
    assert_that(found % 100 == 0, f"some multiple of 100: {found}")


@test("parallel matches short-circuit over unbounded sources")
@small_chunks
def test_parallel_matches_unbounded():
    assert_that(iterate(0, lambda x: x + 1).parallel().any_match(lambda x: x == 500), "any_match")
    assert_that(not iterate(0, lambda x: x + 1).parallel().all_match(lambda x: x < 300), "all_match")
    assert_that(not iterate(0, lambda x: x + 1).parallel().none_match(lambda x: x == 77), "none_match")


@test("parallel limit bounds an unbounded source")
@small_chunks
def test_parallel_limit_unbounded():
    result = iterate(0, lambda x: x + 1).parallel().map(lambda x: x * 2).limit(10).collect(list)
    assert_that(result == [x * 2 for x in range(10)], f"first ten doubled: {result}")


@test("parallel skip, limit and distinct keep their sequential meaning")
@small_chunks
def test_parallel_stateful_stages():
    words = ["hello", "world", "hello", "duck", "whatever", "hello"] * 10
    result = from_collection(words).parallel().map(str.upper).distinct().collect(list)
    assert_that(result == ["HELLO", "WORLD", "DUCK", "WHATEVER"], f"distinct in order: {result}")
    window = iterate(1, lambda x: x + 1).parallel().skip(5).limit(5).collect(list)
    assert_that(window == [6, 7, 8, 9, 10], f"skip then limit: {window}")


@test("the last mode call before the terminal wins")
def test_mode_switch():
    sequence = of(1, 2).parallel().map(str).sequential()
    assert_that(not sequence.is_parallel, "sequential after all")
    assert_that(sequence.parallel().is_parallel, "parallel again")


@test("worker errors reach the caller and invalidate the handle")
@small_chunks
def test_parallel_worker_error():
    sequence = from_collection(numbers).parallel().map(lambda x: 1 // (x - 500))
    assert_raises(ZeroDivisionError, sequence.count)
    assert_that(sequence.state is SequenceState.INVALID, "invalid after failure")


@test("parallel iteration yields elements in encounter order")
@small_chunks
def test_parallel_iteration():
    result = [x for x in from_collection(numbers).parallel().filter(lambda x: x % 2 == 1)]
    assert_that(result == [x for x in numbers if x % 2 == 1], "odd numbers in order")


@test("the worker pool is shared")
def test_pool_shared():
    assert_that(get_pool() is get_pool(), "same pool instance")


def finishes_within(seconds, func):
    """run func on a daemon thread; its result, or None if it is still running after seconds"""
    outcome = []
    runner = threading.Thread(target=lambda: outcome.append(func()), daemon=True)
    runner.start()
    runner.join(seconds)
    return outcome[0] if outcome else None


@test("a parallel pipeline started inside a worker runs on that worker")
def test_nested_parallel_pipelines():
    configure(max_workers=2, chunk_size=4)
    try:
        nested = lambda: (from_collection(range(16)).parallel()
                          .map(lambda x: from_collection(range(10)).parallel().map(lambda y: y + x).sum())
                          .collect(list))
        result = finishes_within(10, nested)
        assert_that(result == [45 + 10 * x for x in range(16)], f"nested sums computed: {result}")
    finally:
        reset_config()


@test("parallel stages and actions can run parallel pipelines of their own")
def test_nested_parallel_filter_and_for_each():
    configure(max_workers=2, chunk_size=4)
    try:
        kept = finishes_within(10, lambda: from_collection(range(40)).parallel()
                               .filter(lambda x: of(1, 2).parallel().count() == 2)
                               .count())
        assert_that(kept == 40, f"every element kept: {kept}")

        totals = []
        lock = threading.Lock()

        def record(x):
            inner = from_range(0, x).parallel().reduce(lambda a, b: a + b, 0)
            with lock:
                totals.append(inner)

        finishes_within(10, lambda: from_range(0, 12).parallel().for_each(record))
        assert_that(sorted(totals) == sorted(x * (x - 1) // 2 for x in range(12)), f"inner totals: {totals}")
    finally:
        reset_config()


@test("only threads running a chunk count as workers")
@small_chunks
def test_in_worker_flag():
    assert_that(not in_worker(), "calling thread is not a worker")
    flags = from_collection(numbers).parallel().map(lambda _: in_worker()).collect(set)
    assert_that(flags == {True}, f"every chunk saw the flag: {flags}")
    assert_that(not in_worker(), "flag does not leak to the caller")


@test("chunked splits an iterator into bounded lists")
def test_chunked():
    chunks = list(chunked(iter(range(10)), 4))
    assert_that(chunks == [[0, 1, 2, 3], [4, 5, 6, 7], [8, 9]], f"chunks: {chunks}")


@test("segment leaves the trailing stateless stages to the terminal")
@small_chunks
def test_segment_trailing():
    double = Stage('map', lambda it: (x * 2 for x in it))
    first_three = Stage('limit', lambda it: iter(list(it)[:3]), stateful=True)
    it, trailing = segment(iter(range(10)), [double, first_three, double])
    assert_that(list(it) == [0, 2, 4], "stateless run before the barrier was applied")
    assert_that(trailing == [double], "one trailing stage")


if __name__ == "__main__":
    suite.main("lazyseq parallel evaluation")
