"""Miscellaneous utility functions."""

from __future__ import annotations

from typing import Any


def dict_merge(target_dict: dict[str, Any], input_dict: dict[str, Any]) -> None:
    """Merge the second dictionary onto the first.

    Nested dictionaries are merged recursively and lists are concatenated.

    Args:
        target_dict: The dictionary to update in-place
        input_dict: The dictionary whose values take precedence

    """
    for k in input_dict:
        if k in target_dict:
            if isinstance(target_dict[k], dict) and isinstance(input_dict[k], dict):
                dict_merge(target_dict[k], input_dict[k])
            elif isinstance(target_dict[k], list) and isinstance(input_dict[k], list):
                target_dict[k] = [*target_dict[k], *input_dict[k]]
            else:
                target_dict[k] = input_dict[k]
        else:
            target_dict[k] = input_dict[k]
