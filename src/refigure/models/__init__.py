"""refigure ドメインモデルパッケージ。"""

from refigure.models._base import RefigureBaseModel
from refigure.models.exit_code import ExitCode
from refigure.models.lookup_result import (
    AnywhereMatch,
    Found,
    LookupResult,
    NotFound,
    Unparseable,
)
from refigure.models.scope import SCOPE_SEPARATOR, ScopePath, WellKnownScope
from refigure.models.settings import (
    DEFAULT_GLOBAL_CONFIG_FILENAMES,
    ConfigFileCandidate,
    ResolverSettings,
)
from refigure.models.source import ConfigurationSource, ResolutionContext

__all__ = [
    "AnywhereMatch",
    "ConfigFileCandidate",
    "ConfigurationSource",
    "DEFAULT_GLOBAL_CONFIG_FILENAMES",
    "ExitCode",
    "Found",
    "LookupResult",
    "NotFound",
    "RefigureBaseModel",
    "ResolutionContext",
    "ResolverSettings",
    "SCOPE_SEPARATOR",
    "ScopePath",
    "Unparseable",
    "WellKnownScope",
]
