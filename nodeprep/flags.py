"""Helpers that turn string-valued kubelet flags into typed values.

Every helper takes the flag name alongside the raw value so that a
``ParseError`` can point at the offending flag.
"""
import re
from typing import Dict, List

from .errors import ParseError

_INT_PATTERN = re.compile(r'[+-]?[0-9]+')
_BOOL_VALUES = {'true': True, 'false': False}


def parse_bool(flag: str, value: str) -> bool:
    if value not in _BOOL_VALUES:
        raise ParseError(flag, value, "boolean")
    return _BOOL_VALUES[value]


def parse_int(flag: str, value: str, bits: int = 32) -> int:
    """Parse a signed decimal integer that must fit in ``bits`` bits"""
    text = value.strip()
    if not _INT_PATTERN.fullmatch(text):
        raise ParseError(flag, value, "integer")
    number = int(text)
    limit = 1 << (bits - 1)
    if not -limit <= number < limit:
        raise ParseError(flag, value, "integer", reason=f"out of range for int{bits}")
    return number


def split_list(value: str) -> List[str]:
    return [item for item in value.split(',') if item]


def parse_key_value_map(flag: str, value: str, separator: str = '=') -> Dict[str, str]:
    """
    Parse "k1<sep>v1,k2<sep>v2" into a dict

    Later duplicate keys overwrite earlier ones. The eviction flags use ``<``
    as the separator while reserved resources use ``=``.
    """
    result = {}
    for pair in split_list(value):
        key, found, item = pair.partition(separator)
        if not found or not key:
            raise ParseError(flag, value, f"comma separated key{separator}value pairs",
                             reason=f"malformed pair {pair!r}")
        result[key] = item
    return result


def parse_feature_gates(flag: str, value: str) -> Dict[str, bool]:
    return {
        gate: parse_bool(flag, enabled)
        for gate, enabled in parse_key_value_map(flag, value, '=').items()
    }
