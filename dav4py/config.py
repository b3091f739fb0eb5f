"""
Configuration files for get_davclient.

A configuration file is a JSON (or, with pyyaml installed, YAML)
dictionary of sections.  Each section is a dictionary of settings, the
connection parameters are prefixed with ``dav_``::

    {
        "default": {"dav_url": "https://dav.example.com/", "dav_user": "alice"},
        "work": {"inherits": "default", "dav_url": "https://dav.example.org/"}
    }

A section may inherit settings from another one (``inherits``), and
"meta"-sections may list other sections (``contains``).  Sections with
``"disable": true`` are skipped when expanding.
"""
import json
import logging
import os
from fnmatch import fnmatch

log = logging.getLogger("dav4py")

## file names tried when no configuration file is given
CONFIG_LOCATIONS = (
    "~/.config/dav4py/config.json",
    "~/.config/dav4py/config.yaml",
    "~/.config/dav4py.conf",
    "/etc/dav4py/config.json",
)

## short forms accepted in configuration files
KEY_ALIASES = {"user": "username", "pass": "password"}


def _is_glob(name):
    return not set(name).isdisjoint("[*?")


def expand_config_section(config, section="default", blacklist=None):
    """
    The names of the sections a section name refers to.  In the
    normal case, that's just [ section ], but there's also:

    * * for all (enabled) sections
    * glob patterns, like work_* for all sections starting with work_
    * "meta"-sections with the keyword "contains" and a list of
      section names (or glob patterns), which may be nested
    """
    if section == "*":
        return [x for x in config if not config[x].get("disable", False)]

    results = []

    def add(names):
        for name in names:
            if name not in results:
                results.append(name)

    if _is_glob(section):
        for name in config:
            if not fnmatch(name, section):
                continue
            ## section names shouldn't contain []?* ... but in case they do, don't recurse
            add([name] if _is_glob(name) else expand_config_section(config, name))
        return results

    if "contains" not in config[section]:
        return [] if config[section].get("disable", False) else [section]

    blacklist = set(blacklist or ())
    blacklist.add(section)
    for subsection in config[section]["contains"]:
        if subsection not in blacklist:
            add(expand_config_section(config, subsection, blacklist))
    return results


def config_section(config, section="default"):
    """The settings of a section, merged with the ones it inherits"""
    ret = {}
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    ret.update(config.get(section, {}))
    return ret


def connection_params(section, keys):
    """
    The ``dav_``-prefixed settings of a section, as parameters for
    DAVClient.  Only names in ``keys`` are used, empty values are
    skipped.
    """
    ret = {}
    for name, value in section.items():
        if not name.startswith("dav_") or not value:
            continue
        name = KEY_ALIASES.get(name[4:], name[4:])
        if name in keys:
            ret[name] = value
    return ret


def _load(fn):
    with open(fn, "rb") as config_file:
        raw = config_file.read()
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    ## yaml is an optional dependency (the "yaml" extra)
    try:
        import yaml
    except ImportError:
        log.error(
            f"config file {fn} exists but is not valid json, and pyyaml is not installed."
        )
        return {}
    try:
        return yaml.load(raw, yaml.SafeLoader)
    except yaml.YAMLError:
        log.error(
            f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
        )
        return {}


def read_config(fn=None):
    """
    Reads a configuration file.  Without a file name, the
    CONFIG_LOCATIONS are tried, and None is returned if none of them
    has a usable file.  Unreadable files give an empty dict.
    """
    if not fn:
        for location in CONFIG_LOCATIONS:
            cfg = read_config(os.path.expanduser(location))
            if cfg:
                return cfg
        return None

    try:
        cfg = _load(fn)
    except FileNotFoundError:
        log.info(f"no config file found at {fn}")
        return {}
    if not isinstance(cfg, dict):
        log.error(f"config file {fn} doesn't contain a dictionary of sections.  It will be ignored")
        return {}
    return cfg
