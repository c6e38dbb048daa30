"""main.py

Entry point for the lncRNA vs pcRNA imbalanced-classification study.
Loads the transcript table, runs the evaluation workflow and writes the
result tables to the configured output directory.
"""

import argparse
import sys
import traceback
import logging

from .di_container import DIContainer


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate lncRNA/pcRNA classifiers under class imbalance")
    parser.add_argument("--data", help="Transcript CSV; overrides data.transcript_file")
    parser.add_argument("--log-experiments", action="store_true",
                        help="Log every run to MLflow regardless of configuration")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    """
    Main function to run the full evaluation workflow.
    """
    args = parse_args(argv)
    container = DIContainer()
    app_logger = None

    try:
        config = container.config()

        app_logger = container.app_logger()
        app_logger.setup(config.core.app_logging_config.log_file)

        transcript_loader = container.transcript_loader()

        if args.log_experiments:
            config.core.evaluation_config.log_experiments = True
        log_experiments = getattr(config.core.evaluation_config, 'log_experiments', False)
        experiment_logger = container.experiment_logger() if log_experiments else None
        workflow = container.workflow(experiment_logger=experiment_logger)

        app_logger.structured_log(
            logging.INFO,
            "Starting lncRNA evaluation",
            app_version=config.app_version,
            environment=config.environment,
            log_level=config.core.app_logging_config.log_level
        )

        with app_logger.log_context(app_version=config.app_version, environment=config.environment):
            dataset = transcript_loader.load(args.data)
            tables = workflow.run(dataset)

        app_logger.structured_log(
            logging.INFO,
            "lncRNA evaluation completed successfully",
            tables=list(tables.keys())
        )

    except Exception as e:
        # Check if it's one of our custom error types (has app_logger and exit_code)
        if hasattr(e, 'app_logger') and hasattr(e, 'exit_code'):
            _handle_known_error(app_logger, e)
        else:
            _handle_unexpected_error(app_logger, e)


def _handle_known_error(app_logger, e):
    if app_logger:
        app_logger.structured_log(
            logging.ERROR,
            f"{type(e).__name__} occurred",
            error_message=str(e),
            error_type=type(e).__name__,
            traceback=traceback.format_exc()
        )
    sys.exit(type(e).exit_code)


def _handle_unexpected_error(app_logger, e):
    if app_logger:
        app_logger.structured_log(
            logging.CRITICAL,
            "Unexpected error occurred",
            error_message=str(e),
            error_type=type(e).__name__,
            traceback=traceback.format_exc()
        )
    else:
        print(f"CRITICAL: Unexpected error occurred: {str(e)}")
        print(traceback.format_exc())
    sys.exit(1)


if __name__ == "__main__":
    main()
