"""
Utilities for loading and combining the configuration of a Zenodo deposition client.

A configuration is a (possibly nested) dictionary.  The keys recognized by 
:py:meth:`~zenodeposit.workflow.DepositionWorkflow.from_config` are:

``access_token``
    the Zenodo personal access token; if not set, the value of the ``ZENODO_ACCESS_TOKEN``
    environment variable is used.
``sandbox``
    if True, deposit into the Zenodo sandbox service rather than production (default: False)
``base_url``
    the depositions endpoint to use, over-riding the ``sandbox`` selection
``timeout``
    the number of seconds to wait for a response to any single request
``verify_ssl``
    if False, do not verify the server's SSL certificate (default: True)
``metadata``
    default values for the descriptive fields of the record (see 
    :py:class:`~zenodeposit.metadata.RecordDraft`)
"""
import os, json
from collections.abc import Mapping
from copy import deepcopy

import yaml

from .exceptions import ConfigurationError

TOKEN_ENV_VAR = "ZENODO_ACCESS_TOKEN"

def load_from_file(configfile: str) -> Mapping:
    """
    read the configuration from the given file.  The file is parsed as JSON if its name ends 
    in ".json"; otherwise, it is parsed as YAML.

    :raises IOError:     if the file cannot be opened or read
    :raises ValueError:  if the contents cannot be parsed as JSON
    :raises yaml.YAMLError:  if the contents cannot be parsed as YAML
    :raises ConfigurationError:  if the contents do not represent a dictionary
    """
    with open(configfile) as fd:
        if configfile.endswith('.json'):
            out = json.load(fd)
        else:
            out = yaml.safe_load(fd)

    if out is None:
        out = {}
    if not isinstance(out, Mapping):
        raise ConfigurationError(f"{configfile}: configuration data is not a dictionary")
    return out

def merge_config(primary: Mapping, defconf: Mapping) -> Mapping:
    """
    merge two configurations, with the values in ``primary`` taking precedence over those in 
    ``defconf``.  Nested dictionaries are merged recursively.  Neither input is modified.
    """
    out = deepcopy(defconf)
    for key, val in primary.items():
        if isinstance(val, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = merge_config(val, out[key])
        else:
            out[key] = deepcopy(val)
    return out

def get_access_token(config: Mapping):
    """
    return the access token given in the configuration, falling back to the value of the 
    ``ZENODO_ACCESS_TOKEN`` environment variable.  None is returned if neither is set.
    """
    return config.get('access_token') or os.environ.get(TOKEN_ENV_VAR) or None
