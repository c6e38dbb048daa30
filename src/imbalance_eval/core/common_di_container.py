from dependency_injector import containers, providers

from imbalance_eval.core.config_management.config_manager import ConfigManager
from imbalance_eval.framework.data_access.csv_data_access import CSVDataAccess
from imbalance_eval.core.app_logging.app_logger import AppLogger
from imbalance_eval.core.error_handling.error_handler_factory import ErrorHandlerFactory
from imbalance_eval.core.app_file_handling.app_file_handler import LocalAppFileHandler


class CommonDIContainer(containers.DeclarativeContainer):
    """Container for common application dependencies."""

    app_file_handler: providers.Provider[LocalAppFileHandler] = providers.Singleton(
        LocalAppFileHandler
    )

    config: providers.Provider[ConfigManager] = providers.Singleton(
        ConfigManager,
        app_file_handler=app_file_handler
    )

    app_logger: providers.Provider[AppLogger] = providers.Singleton(
        AppLogger,
        config=config
    )

    error_handler_factory: providers.Provider[ErrorHandlerFactory] = providers.Singleton(
        ErrorHandlerFactory,
        app_logger=app_logger
    )

    data_access: providers.Provider[CSVDataAccess] = providers.Singleton(
        CSVDataAccess,
        config=config,
        app_logger=app_logger,
        app_file_handler=app_file_handler,
        error_handler=error_handler_factory
    )
