"""
Core backend base components.

This package provides foundational classes and utilities that should be used
throughout the Django application for consistency and maintainability.
"""

from .viewsets import BaseViewSet
from .serializers import (
    BaseModelSerializer,
    TimestampedSerializer,
    UserSummarySerializer,
)
from .mixins import OptimizedQuerysetMixin
from .state_machine import StateMachine

__all__ = [
    # ViewSets
    'BaseViewSet',

    # Serializers
    'BaseModelSerializer',
    'TimestampedSerializer',
    'UserSummarySerializer',

    # Mixins
    'OptimizedQuerysetMixin',

    # State machines
    'StateMachine',
]
