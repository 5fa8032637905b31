"""Policy-store backends consulted by validation rules."""

from workload_admission.stores.base import PolicyStore
from workload_admission.stores.cached import CachedStore
from workload_admission.stores.configmap import ConfigMapStore
from workload_admission.stores.memory import InMemoryStore
from workload_admission.stores.sqlite import SQLiteStore

__all__ = ["CachedStore", "ConfigMapStore", "InMemoryStore", "PolicyStore", "SQLiteStore"]
