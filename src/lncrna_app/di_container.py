from dependency_injector import providers

from imbalance_eval.evaluation.di_container import EvaluationDIContainer
from .evaluation_workflow import EvaluationWorkflow
from .transcript_loader import TranscriptLoader


class DIContainer(EvaluationDIContainer):
    """
    lncRNA application container. Inherits the harness components from
    EvaluationDIContainer and adds the transcript loader and the workflow.
    """

    transcript_loader = providers.Factory(
        TranscriptLoader,
        config=EvaluationDIContainer.config,
        data_access=EvaluationDIContainer.data_access,
        app_logger=EvaluationDIContainer.app_logger,
        error_handler=EvaluationDIContainer.error_handler
    )

    workflow = providers.Factory(
        EvaluationWorkflow,
        config=EvaluationDIContainer.config,
        partitioner=EvaluationDIContainer.partitioner,
        preprocessor=EvaluationDIContainer.preprocessor,
        harness=EvaluationDIContainer.harness,
        reporter=EvaluationDIContainer.reporter,
        classifiers=EvaluationDIContainer.classifiers,
        hyperparameter_manager=EvaluationDIContainer.hyperparameter_manager,
        feature_ranker=EvaluationDIContainer.feature_ranker,
        model_selector=EvaluationDIContainer.model_selector,
        data_access=EvaluationDIContainer.data_access,
        app_logger=EvaluationDIContainer.app_logger,
        error_handler=EvaluationDIContainer.error_handler
    )
