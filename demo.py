#!/usr/bin/env python3
"""
walkthrough of the lazyseq engine: building sequences, laziness, intermediate
vs terminal operations, sequential vs parallel evaluation and the common
transformations and aggregations.
"""

import argparse
import logging
import threading
import numpy as np
import dgen
from lazyseq import (
    from_collection, of, empty, generate, iterate, random_supplier,
    configure, shutdown_pool, ClosedSequenceError
)

# configure minimal logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

PERSON_SCHEMA = {
    'name': 'first_name',
    'age': ('pyint', {'min_value': 18, 'max_value': 65}),
    'city': {'_qen_provider': 'choice', 'from': ['nyc', 'la', 'chicago']},
}


def section(title: str) -> None:
    print(f"\n--- {title} ---")


def show_construction(int_list):
    section("construction")
    print(from_collection(int_list).count())
    print(of(1, 2, 3).count())
    print(of(5).count())
    print(of().count())
    print(empty().count())


def show_modes():
    section("sequential vs parallel")
    announce = lambda x: print(f"{x} {threading.current_thread().name}")
    print("sequential:")
    of(5, 6, 7).for_each(announce)
    print("parallel:")
    of(5, 6, 7).parallel().for_each(announce)


def show_unbounded(seed):
    section("unbounded sequences")
    rng = np.random.default_rng(seed)
    generate(random_supplier(rng)).limit(5).for_each(print)

    # creation and limit only describe the pipeline, nothing runs until for_each
    twenty = iterate(10, lambda x: x + 2).limit(20)
    twenty.for_each(lambda x: print(x, end=' '))
    print()
    try:
        twenty.count()
    except ClosedSequenceError as e:
        print(f"second terminal operation refused: {e}")

    iterate(10, lambda x: x <= 48, lambda x: x + 2).for_each(lambda x: print(x, end=' '))
    print()


def show_terminals(int_list):
    section("terminal operations")
    from_collection(int_list).max().if_present(lambda v: print(f"max value in int_list is: {v}"))
    print(iterate(10, lambda x: x + 2).find_first().get())
    print(iterate(10, lambda x: x + 2).find_any().get())
    print(iterate(10, lambda x: x + 2).any_match(lambda x: x == 20))
    print(from_collection(int_list).reduce(lambda a, b: a + b).get())
    print(from_collection(int_list).reduce(lambda a, b: a * b).get())
    print(from_collection(int_list).collect(list))


def show_stages(int_list, seed):
    section("intermediate operations")
    print(from_collection(int_list).filter(lambda x: x % 2 == 0).collect(list))

    words = ["hello", "world", "hello", "duck", "whatever", "hello"]
    print(from_collection(words).collect(set))
    print(from_collection(words).distinct().collect(list))
    print(iterate(1, lambda x: x + 1).skip(5).limit(5).to.joining())

    people = dgen.from_schema(PERSON_SCHEMA, seed=seed).take(50)
    over_thirty = people.parallel().filter(lambda p: p['age'] >= 30).to.df()
    print(over_thirty.groupby('city')['age'].mean().round(1).to_string())


def create_cli_interface() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='lazyseq walkthrough')
    parser.add_argument('--parallel-workers', type=int, default=None,
                        help='worker pool size (default: cpu count)')
    parser.add_argument('--chunk-size', type=int, default=256, help='elements per parallel chunk')
    parser.add_argument('--seed', type=int, default=42, help='seed for random and generated data')
    parser.add_argument('--verbose', '-v', action='store_true', help='debug logging')
    return parser


def main():
    """main entry point for the walkthrough"""
    args = create_cli_interface().parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = configure(max_workers=args.parallel_workers, chunk_size=args.chunk_size)
    logger.info(f"running with {config.workers} workers, chunk size {config.chunk_size}")

    int_list = [1, 2, 3, 4, 5]
    try:
        show_construction(int_list)
        show_modes()
        show_unbounded(args.seed)
        show_terminals(int_list)
        show_stages(int_list, args.seed)
    finally:
        shutdown_pool()


if __name__ == "__main__":
    main()
