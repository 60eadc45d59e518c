import suite
import numpy as np
from lazyseq import (
    Sequence, from_collection, from_iterable, of, empty, from_range, generate,
    iterate, concat, random_supplier, S, InvalidArgumentError
)

test = suite.test
assert_that = suite.assert_that
assert_raises = suite.assert_raises

int_list = [1, 2, 3, 4, 5]


# from_collection() tests

@test("from_collection preserves elements and order")
def test_from_collection_roundtrip():
    result = from_collection(int_list).collect(list)
    assert_that(result == int_list, f"should equal the source list: {result}")


@test("from_collection reads the collection only when a terminal runs")
def test_from_collection_is_lazy():
    data = [1, 2]
    sequence = from_collection(data)
    data.append(3)
    assert_that(sequence.count() == 3, "late additions should be seen")


@test("from_collection accepts any iterable, aliases included")
def test_from_collection_aliases():
    assert_that(from_iterable(range(4)).collect(list) == [0, 1, 2, 3], "range source")
    assert_that(S("abc").collect(list) == ['a', 'b', 'c'], "string source")
    assert_that(isinstance(from_collection(()), Sequence), "should build a sequence")


# of() / empty() tests

@test("of yields its arguments in order")
def test_of_values():
    assert_that(of(1, 2, 3).collect(list) == [1, 2, 3], "three values")
    assert_that(of(5).count() == 1, "a single value")


@test("of with no arguments is empty")
def test_of_no_values():
    assert_that(of().count() == 0, "no values gives nothing")


@test("empty yields nothing")
def test_empty():
    assert_that(empty().collect(list) == [], "empty list")
    assert_that(empty().find_first().is_empty, "no first element")


# from_range() tests

@test("from_range excludes its stop value")
def test_from_range():
    assert_that(from_range(3, 7).collect(list) == [3, 4, 5, 6], "3..6")
    assert_that(from_range(10, 0, -3).collect(list) == [10, 7, 4, 1], "descending step")


@test("from_range rejects a zero step")
def test_from_range_zero_step():
    assert_raises(InvalidArgumentError, lambda: from_range(0, 5, 0))


# generate() tests

@test("generate calls the supplier once per pulled element")
def test_generate_pulls_on_demand():
    calls = []

    def supplier():
        calls.append(1)
        return len(calls)

    result = generate(supplier).limit(4).collect(list)
    assert_that(result == [1, 2, 3, 4], f"supplier values in order: {result}")
    assert_that(len(calls) == 4, f"supplier should run exactly 4 times, ran {len(calls)}")


@test("generate does not call the supplier before a terminal operation")
def test_generate_is_lazy():
    calls = []
    sequence = generate(lambda: calls.append(1)).limit(3)
    assert_that(calls == [], "nothing pulled yet")
    sequence.count()
    assert_that(len(calls) == 3, "three pulls")


@test("generate rejects a non-callable supplier")
def test_generate_requires_callable():
    assert_raises(InvalidArgumentError, lambda: generate(42))


@test("random_supplier draws from the injected generator")
def test_random_supplier_seeded():
    first = generate(random_supplier(np.random.default_rng(7), 0, 100)).limit(10).collect(list)
    second = generate(random_supplier(np.random.default_rng(7), 0, 100)).limit(10).collect(list)
    assert_that(first == second, "same seed, same values")
    assert_that(all(0 <= x < 100 for x in first), f"values within bounds: {first}")
    assert_that(all(isinstance(x, int) for x in first), "plain python ints")


# iterate() tests

@test("iterate with limit yields successive applications")
def test_iterate_unbounded():
    for n in (0, 1, 5):
        expected = [3 * 2 ** i for i in range(n)]
        result = iterate(3, lambda x: x * 2).limit(n).collect(list)
        assert_that(result == expected, f"limit({n}) gave {result}")


@test("iterate with a predicate stops quietly when it fails")
def test_iterate_bounded():
    result = iterate(10, lambda x: x <= 48, lambda x: x + 2).collect(list)
    assert_that(result == list(range(10, 49, 2)), f"10..48 by 2: {result}")
    assert_that(len(result) == 20, "twenty elements")


@test("iterate with a predicate failing on the seed is empty")
def test_iterate_bounded_seed_fails():
    assert_that(iterate(100, lambda x: x < 10, lambda x: x + 1).count() == 0, "nothing yielded")


@test("iterate validates its functions")
def test_iterate_arguments():
    assert_raises(InvalidArgumentError, lambda: iterate(1))
    assert_raises(InvalidArgumentError, lambda: iterate(1, "not callable"))
    assert_raises(InvalidArgumentError, lambda: iterate(1, lambda x: True, None))


# concat() tests

@test("concat yields the first sequence then the second")
def test_concat():
    result = concat(of(1, 2), from_range(3, 5)).collect(list)
    assert_that(result == [1, 2, 3, 4], f"joined in order: {result}")


@test("concat can bound an unbounded tail")
def test_concat_unbounded_tail():
    result = concat(of('a'), generate(lambda: 'z')).limit(3).collect(list)
    assert_that(result == ['a', 'z', 'z'], f"tail pulled on demand: {result}")


if __name__ == "__main__":
    suite.main("lazyseq source constructors")
