"""Stratified, ratio-controlled train/validate/test partitioning."""

import logging
from typing import Dict, Mapping, Union
import numpy as np

from imbalance_eval.core.app_logging.base_app_logger import BaseAppLogger
from imbalance_eval.core.error_handling.base_error_handler import BaseErrorHandler
from imbalance_eval.framework.data_classes import (
    BINARY_LABELS,
    PARTITION_NAMES,
    Dataset,
    PartitionRequest,
    PartitionSet
)
from .base_partitioner import BasePartitioner


class DatasetPartitioner(BasePartitioner):
    """
    Builds disjoint train/validate/test index sets with explicit per-class counts.

    Each class is shuffled on its own random stream derived from the seed, so
    the draw for one class does not depend on the size of the other. Blocks are
    then sliced contiguously in train -> validate -> test order, which is what
    keeps the partitions disjoint.
    """

    def __init__(self, app_logger: BaseAppLogger, error_handler: BaseErrorHandler):
        self.app_logger = app_logger
        self.error_handler = error_handler

        self.app_logger.structured_log(logging.INFO, "DatasetPartitioner initialized")

    @staticmethod
    def log_performance(func):
        """Decorator factory for performance logging"""
        def wrapper(*args, **kwargs):
            instance = args[0]
            return instance.app_logger.log_performance(func)(*args, **kwargs)
        return wrapper

    @log_performance
    def partition(self,
                  dataset: Dataset,
                  class_counts: Union[PartitionRequest, Mapping[int, Mapping[str, int]]],
                  seed: int) -> PartitionSet:
        request = self._to_request(class_counts)

        self.app_logger.structured_log(
            logging.INFO,
            "Starting partitioning",
            n_samples=len(dataset),
            available=dataset.class_counts(),
            requested={label: counts.as_tuple() for label, counts in request.class_counts.items()},
            seed=seed
        )

        blocks = {name: [] for name in PARTITION_NAMES}
        class_streams = np.random.SeedSequence(seed).spawn(len(BINARY_LABELS))

        for label, stream in zip(BINARY_LABELS, class_streams):
            counts = request.class_counts.get(label)
            if counts is None:
                continue

            class_idx = dataset.class_indices(label)
            if counts.total > len(class_idx):
                raise self.error_handler.create_error_handler(
                    'insufficient_samples',
                    "Partition request exceeds available class members",
                    label=label,
                    requested=counts.total,
                    available=len(class_idx)
                )

            shuffled = np.random.default_rng(stream).permutation(class_idx)
            start = 0
            for name in PARTITION_NAMES:
                stop = start + getattr(counts, name)
                blocks[name].append(shuffled[start:stop])
                start = stop

        try:
            partition_set = PartitionSet(
                **{name: np.sort(np.concatenate(parts)) if parts else np.array([], dtype=int)
                   for name, parts in blocks.items()},
                seed=seed
            )
        except ValueError as e:
            raise self.error_handler.create_error_handler(
                'partitioning',
                "Partitions are not disjoint",
                original_error=str(e)
            )

        self.app_logger.structured_log(
            logging.INFO,
            "Partitioning completed",
            sizes=partition_set.sizes()
        )
        return partition_set

    def materialize(self, dataset: Dataset, partition_set: PartitionSet) -> Dict[str, Dataset]:
        return {
            name: dataset.subset(indices, name=name)
            for name, indices in partition_set.as_dict().items()
        }

    def _to_request(self, class_counts) -> PartitionRequest:
        try:
            request = (class_counts if isinstance(class_counts, PartitionRequest)
                       else PartitionRequest.from_mapping(class_counts))
        except (TypeError, ValueError) as e:
            raise self.error_handler.create_error_handler(
                'partitioning',
                "Invalid partition request",
                original_error=str(e)
            )

        unknown = set(request.class_counts) - set(BINARY_LABELS)
        if unknown:
            raise self.error_handler.create_error_handler(
                'partitioning',
                "Partition request names unknown labels",
                unknown_labels=sorted(unknown)
            )
        return request
