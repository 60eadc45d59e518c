'''
.------..------..------..------.
|d.--. ||g.--. ||e.--. ||n.--. |
| :/\: || :/\: || (\/) || :(): |
| (__) || :\/: || :\/: || ()() |
| '--'d|| '--'g|| '--'e|| '--'n|
`------'`------'`------'`------'

schema-driven fake records, served as unbounded lazy sequences.
'''

import json
import re
import numpy as np
from faker import Faker
from lazyseq import generate, Sequence, InvalidArgumentError
from typing import Any, Dict, Optional, Union, TextIO
from pathlib import Path

DEFAULT_LIST_COUNT = 5


class Generator:
    """schema interpreter."""

    def __init__(self, seed: Optional[int] = None):
        self._fake = Faker()
        if seed is not None:
            self._fake.seed_instance(seed)
        self._rng = np.random.default_rng(seed)

    def _call_faker(self, provider: str, kwargs: Optional[Dict] = None) -> Any:
        method = getattr(self._fake, provider, None)
        if method is None:
            raise InvalidArgumentError(f"faker has no provider '{provider}'")
        return method(**(kwargs or {}))

    def _resolve_directive(self, config: Dict, context: Dict) -> Any:
        provider = config["_qen_provider"]
        if provider == "ref":
            key = config["key"]
            if key not in context:
                raise InvalidArgumentError(f"reference to '{key}' not found in current context.")
            value = context[key]
            return config["format"].format(value) if "format" in config else value

        if provider == "choice":
            options = config["from"]
            # index rather than rng.choice, which would hand back numpy scalars
            return options[int(self._rng.integers(len(options)))]

        if provider == "literal":
            if "value" not in config:
                raise InvalidArgumentError("_qen_provider 'literal' requires a 'value' key.")
            return config["value"]

        raise InvalidArgumentError(f"unknown _qen_provider: '{provider}'")

    def create(self, schema: Any, context: Optional[Dict] = None) -> Any:
        scope = context or {}

        if isinstance(schema, dict):
            if "_qen_provider" in schema:
                return self._resolve_directive(schema, scope)
            record = {}
            for key, sub_schema in schema.items():
                # refs may look up into the parent and sideways into fields already built
                record[key] = self.create(sub_schema, {**scope, **record})
            return record

        if isinstance(schema, list):
            if not schema:
                return []
            item_schema = schema[0]
            count = self._list_count(item_schema)
            if isinstance(item_schema, dict):
                item_schema = item_schema.get('_qen_items', item_schema)
            return [self.create(item_schema, scope) for _ in range(count)]

        if isinstance(schema, str):
            return self._call_faker(schema) if hasattr(self._fake, schema) else schema

        if isinstance(schema, tuple) and len(schema) == 2 and isinstance(schema[1], dict):
            return self._call_faker(schema[0], schema[1])

        return schema

    def _list_count(self, item_schema: Any) -> int:
        if not isinstance(item_schema, dict) or "_qen_count" not in item_schema:
            return DEFAULT_LIST_COUNT
        count = item_schema["_qen_count"]
        if isinstance(count, int):
            return count
        low, high = count
        return int(self._rng.integers(low, high, endpoint=True))


class SchemaProvider:
    """a reusable source of records; every call hands out a fresh sequence"""

    def __init__(self, schema: Any, seed: Optional[int] = None):
        self._schema = schema
        self._generator = Generator(seed)

    def sequence(self) -> Sequence:
        """an unbounded sequence of records; bound it before counting or collecting"""
        return generate(lambda: self._generator.create(self._schema))

    def take(self, count: int) -> Sequence:
        return self.sequence().limit(count)


def from_schema(schema: Any, seed: Optional[int] = None) -> SchemaProvider:
    return SchemaProvider(schema, seed)


# --- schema inference ---

_UUID = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)
_KEY_HINTS = ('name', 'city', 'country', 'address')


def _infer_string(value: str, key_hint: str) -> str:
    if _UUID.match(value):
        return 'uuid4'
    if '@' in value and '.' in value and ' ' not in value:
        return 'email'
    if value.startswith(('http://', 'https://')):
        return 'url'
    for hint in _KEY_HINTS:
        if hint in key_hint:
            return hint
    if ' ' not in value:
        return 'word'
    if '\n' in value or len(value.split()) > 10:
        return 'paragraph'
    return 'sentence'


def infer_schema(obj: Any, key_hint: Optional[str] = None) -> Any:
    """recursively guess a schema that produces records shaped like obj"""
    if isinstance(obj, dict):
        return {k: infer_schema(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        if not obj:
            return []
        return [{"_qen_items": infer_schema(obj[0]), "_qen_count": len(obj)}]
    if isinstance(obj, str):
        return _infer_string(obj, (key_hint or "").lower())
    # bool before int, bool is an int subclass
    if isinstance(obj, bool):
        return {'_qen_provider': 'choice', 'from': [True, False]}
    if isinstance(obj, int):
        return 'pyint', {'min_value': obj - abs(obj), 'max_value': obj + abs(obj) or 100}
    if isinstance(obj, float):
        return 'pyfloat', {'min_value': obj - abs(obj), 'max_value': obj + abs(obj) or 100.0}
    return {'_qen_provider': 'literal', 'value': obj}


def _load_json(json_input: Union[str, Path, TextIO]) -> Any:
    """a str is json text; a Path is read from disk"""
    if isinstance(json_input, Path):
        return json.loads(json_input.read_text())
    if isinstance(json_input, str):
        return json.loads(json_input)
    return json.load(json_input)


def from_json(json_input: Union[str, Path, TextIO], seed: Optional[int] = None) -> SchemaProvider:
    """
    creates a data generator by inferring a schema from an example json object or file.

    :param json_input: json text, a pathlib.Path to a json file, or a file-like object.
    :param seed: an optional seed for reproducible data generation.
    :return: a schema provider; .take(n) gives a bounded sequence of records.
    """
    data = _load_json(json_input)
    # a list of objects uses its first element as the template
    template = data[0] if isinstance(data, list) and data else data
    return SchemaProvider(infer_schema(template), seed)
