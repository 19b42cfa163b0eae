import json
import os
from dataclasses import dataclass
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from urllib.parse import unquote
from urllib.parse import urlparse

from davclient.lib import error
from davclient.lib.auth import build_auth_object
from davclient.lib.error import log
from davclient.lib.url import make_uri
from davclient.lib.url import normalize_base_path
from davclient.lib.url import normalize_server
from davclient.lib.url import split_url

"""
Connection configuration.

``ClientConfig`` holds server, base path and credentials of one client.
The rest of this module finds connection parameters in environment
variables and configuration files, for ``get_davclient``.
"""

## Keyword arguments accepted by the clients
CONNKEYS = set(
    (
        "url",
        "server",
        "base_path",
        "username",
        "password",
        "auth_type",
        "use_default_credentials",
        "proxy",
        "timeout",
        "headers",
        "huge_tree",
        "ssl_verify_cert",
        "ssl_cert",
    )
)

_BOOLEAN_KEYS = ("use_default_credentials", "huge_tree")


@dataclass(frozen=True)
class Credentials:
    """
    Snapshot of the credential settings of a client, taken when a
    request is built.

    Attributes:
        use_default_credentials: Let the transport pick up ambient
            credentials (.netrc, environment) instead of sending any
            explicit ones
        auth: Explicit niquests auth object, or None
    """

    use_default_credentials: bool = True
    auth: Any = None


class ClientConfig:
    """
    Server, base path and credentials of one client.

    Server and base path are fixed at construction.  The credential
    attributes (username, password, auth, auth_type,
    use_default_credentials) may be changed between calls; they are read
    each time a request is built, so changing them while requests are in
    flight is not safe.

    If use_default_credentials is not given, ambient credentials are
    used unless explicit ones (auth or username/password) are.
    """

    def __init__(
        self,
        server: Optional[str],
        base_path: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        auth: Any = None,
        auth_type: Optional[str] = None,
        use_default_credentials: Optional[bool] = None,
    ) -> None:
        self._server = normalize_server(server)
        if not self._server:
            raise error.InvalidArgumentError(reason="server must be given")
        if "://" not in self._server:
            raise error.InvalidArgumentError(
                url=self._server, reason="server must include the scheme, i.e. https://"
            )
        self._base_path = normalize_base_path(base_path)

        self.username = username
        self.password = password
        self.auth = auth
        self.auth_type = auth_type
        if use_default_credentials is None:
            use_default_credentials = auth is None and username is None and password is None
        self.use_default_credentials = use_default_credentials

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "ClientConfig":
        """
        Build a config from a full URL, the path becomes the base path.
        Credentials embedded in the URL are used unless given explicitly.
        """
        server, base_path = split_url(url)
        parsed = urlparse(url)
        if parsed.username and kwargs.get("username") is None:
            kwargs["username"] = unquote(parsed.username)
        if parsed.password and kwargs.get("password") is None:
            kwargs["password"] = unquote(parsed.password)
        if kwargs.get("base_path"):
            base_path = kwargs.pop("base_path")
        else:
            kwargs.pop("base_path", None)
        return cls(server, base_path, **kwargs)

    @property
    def server(self) -> str:
        return self._server

    @property
    def base_path(self) -> str:
        return self._base_path

    def uri(self, path: Optional[str], collection: bool = False) -> str:
        return make_uri(self._server, self._base_path, path, collection)

    def credentials(self) -> Credentials:
        if self.use_default_credentials:
            return Credentials(use_default_credentials=True)
        auth = self.auth
        if auth is None and (self.username is not None or self.password is not None):
            auth = build_auth_object(self.auth_type, self.username, self.password)
        return Credentials(use_default_credentials=False, auth=auth)

    def __repr__(self) -> str:
        return "ClientConfig(server=%r, base_path=%r, use_default_credentials=%r)" % (
            self._server,
            self._base_path,
            self.use_default_credentials,
        )


def _coerce(key: str, value: Any) -> Any:
    """Environment variables are strings, convert the few keys that aren't."""
    if not isinstance(value, str):
        return value
    if key in _BOOLEAN_KEYS or key == "ssl_verify_cert":
        if value.lower() in ("0", "false", "no", "off"):
            return False
        if value.lower() in ("1", "true", "yes", "on"):
            return True
    if key == "timeout":
        return float(value)
    if key == "headers":
        return json.loads(value)
    return value


def config_section(config: Dict[str, Any], section: str = "default") -> Dict[str, Any]:
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def _default_config_files() -> List[str]:
    home = os.environ.get("HOME", "/")
    user_dir = os.path.join(home, ".config", "davclient")
    return [os.path.join(user_dir, "webdav.%s" % ext) for ext in ("conf", "yaml", "json")] + [
        "/etc/davclient/webdav.conf"
    ]


def _parse_config_text(fn: str, text: bytes) -> Dict[str, Any]:
    """JSON is tried first; pyyaml is optional and only imported for non-JSON files."""
    try:
        return json.loads(text)
    except ValueError:
        pass
    try:
        import yaml
    except ImportError:
        log.error(f"config file {fn} is not valid json, and pyyaml is not installed")
        return {}
    try:
        return yaml.load(text, yaml.SafeLoader) or {}
    except yaml.YAMLError:
        log.error(f"config file {fn} is neither valid json nor yaml, it will be ignored", exc_info=True)
        return {}


def read_config(fn: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Read a JSON or YAML configuration file.  Without a file name the
    default locations are searched and the first non-empty file wins;
    None is returned when there is none.  A file that cannot be read
    or parsed yields an empty dict.
    """
    if not fn:
        for candidate in _default_config_files():
            cfg = read_config(candidate)
            if cfg:
                return cfg
        return None

    try:
        with open(fn, "rb") as config_file:
            text = config_file.read()
    except FileNotFoundError:
        log.info(f"no config file at {fn}")
        return {}
    except OSError as e:
        log.error(f"config file {fn} can not be read: {e}")
        return {}
    cfg = _parse_config_text(fn, text)
    if not isinstance(cfg, dict):
        log.error(f"config file {fn} does not hold a mapping of sections, it will be ignored")
        return {}
    return cfg


def find_connection_params(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section_name: Optional[str] = None,
    environment: bool = True,
) -> Dict[str, Any]:
    """
    Look up connection parameters, in this order:

    * Environment variables prepended with `WEBDAV_`, like `WEBDAV_URL`,
      `WEBDAV_BASE_PATH`, `WEBDAV_USERNAME`, `WEBDAV_PASSWORD`.
    * A configuration file, given by parameter, by `WEBDAV_CONFIG_FILE`
      or found in the default locations.  The section is `default`
      unless given by parameter or `WEBDAV_CONFIG_SECTION`.  Keys in the
      section are prepended with `webdav_`.

    Returns the first non-empty set of parameters found, or an empty dict.
    """
    if environment:
        conf = {}
        for conf_key in (
            x
            for x in os.environ
            if x.startswith("WEBDAV_") and not x.startswith("WEBDAV_CONFIG")
        ):
            key = conf_key[7:].lower()
            if key in CONNKEYS:
                conf[key] = _coerce(key, os.environ[conf_key])
        if conf:
            return conf
        if not config_file:
            config_file = os.environ.get("WEBDAV_CONFIG_FILE")
        if not config_section_name:
            config_section_name = os.environ.get("WEBDAV_CONFIG_SECTION")

    if check_config_file:
        if not config_section_name:
            config_section_name = "default"

        cfg = read_config(config_file)
        if cfg:
            section = config_section(cfg, config_section_name)
            conn_params = {}
            for k in section:
                if k.startswith("webdav_") and section[k] is not None:
                    key = k[7:]
                    if key == "pass":
                        key = "password"
                    if key == "user":
                        key = "username"
                    if key in CONNKEYS:
                        conn_params[key] = _coerce(key, section[k])
            if conn_params:
                return conn_params
    return {}
