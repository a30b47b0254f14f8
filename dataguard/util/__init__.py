# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Utility package providing configuration helpers for DataGuard.
"""

from .config import (
    ENV_PREFIX, get_config_value, merge_configs,
    normalize_config_key, load_config_file, save_config_file,
    get_bool_config, get_int_config
)

__all__ = [
    'ENV_PREFIX', 'get_config_value', 'merge_configs',
    'normalize_config_key', 'load_config_file', 'save_config_file',
    'get_bool_config', 'get_int_config'
]
