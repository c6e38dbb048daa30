from .base_class_balancer import BaseClassBalancer
from .class_balancer import ClassBalancer

__all__ = ['BaseClassBalancer', 'ClassBalancer']
