from .base_partitioner import BasePartitioner
from .dataset_partitioner import DatasetPartitioner

__all__ = ['BasePartitioner', 'DatasetPartitioner']
