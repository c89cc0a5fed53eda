import logging

from typing import List, Optional

from atmfjstc.lib.fluent_codegen.LayoutSettings import LayoutSettings, DEFAULT_SETTINGS
from atmfjstc.lib.fluent_codegen.errors import UnclosedBuilderError, describe_builder


LOG = logging.getLogger(__name__)


class BuildContext:
    """
    State shared by all the builders that participate in generating a unit of code (typically a file).

    A context is passed explicitly to each top-level builder (via the `context=` parameter) and is automatically
    handed down to all the builders spawned from it. It provides:

    - Tracking of open builders, so that builders abandoned without being closed can be detected (`check_all_closed`)
    - Facilities that nested builders need to report back to the unit as a whole, i.e. that a logger is needed
      (`request_logger`) or that some name must be imported (`require_import`)
    - Options that affect what builders generate (`debug_code`, `logger_name`) and the layout `settings`

    The context can also be used in a ``with`` statement, in which case `check_all_closed` is automatically called
    when the block exits normally.
    """

    debug_code: bool
    logger_name: str
    settings: LayoutSettings

    _open_builders: List
    _imports: set
    _logger_requested: bool

    def __init__(
        self, debug_code: bool = False, logger_name: str = 'LOGGER', settings: Optional[LayoutSettings] = None
    ):
        self.debug_code = debug_code
        self.logger_name = logger_name
        self.settings = DEFAULT_SETTINGS if settings is None else settings

        self._open_builders = []
        self._imports = set()
        self._logger_requested = False

    @property
    def imports(self) -> List[str]:
        return sorted(self._imports)

    @property
    def logger_requested(self) -> bool:
        return self._logger_requested

    @property
    def open_builders(self) -> List:
        return list(self._open_builders)

    def request_logger(self) -> str:
        """
        Records that the generated code needs a logger to be declared, and returns the name under which it is
        accessible.
        """
        if not self._logger_requested:
            LOG.debug("Logger '%s' requested", self.logger_name)

        self._logger_requested = True

        return self.logger_name

    def require_import(self, name: str):
        if name not in self._imports:
            LOG.debug("Import required: %s", name)

        self._imports.add(name)

    def register_open(self, builder):
        self._open_builders.append(builder)

    def register_closed(self, builder):
        self._open_builders = [item for item in self._open_builders if item is not builder]

    def check_all_closed(self):
        """
        Raises `UnclosedBuilderError` if any builder created under this context has not been closed.
        """
        if len(self._open_builders) == 0:
            return

        descriptions = [describe_builder(builder) for builder in self._open_builders]
        LOG.debug("Unclosed builders at end of context: %s", descriptions)

        raise UnclosedBuilderError(descriptions)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.check_all_closed()

        return False
