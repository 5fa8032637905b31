# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Executor for running one admission review end to end.

Orchestrates the full execution flow:
1. Create the policy store from configuration
2. Build validation and mutation chains from rule configuration
3. Hand the review to the AdmissionCoordinator
4. Return the AdmissionReview wrapped in a RunnerOutput
"""

from __future__ import annotations

import logging

from workload_admission.chains import MutationChain, ValidationChain
from workload_admission.coordinator import INTERNAL_ERROR_REASON, AdmissionCoordinator
from workload_admission.stores import (
    CachedStore,
    ConfigMapStore,
    InMemoryStore,
    PolicyStore,
    SQLiteStore,
)

from .factory import RuleFactory, RuleFactoryError
from .schema import AdmissionReviewOutput, RunnerInput, RunnerOutput, StoreConfigSchema

logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """Raised when execution fails."""

    pass


class Executor:
    """Executes one admission review with the configured rules.

    The executor is designed for dependency injection to support testing.
    Pass a custom store to the constructor to override store creation.

    Example:
        executor = Executor()
        output = await executor.execute(input_data)

        # For testing with a prepared store:
        store = InMemoryStore({"validator-config": {"team-a": "2000m"}})
        executor = Executor(store=store)
    """

    def __init__(
        self,
        store: PolicyStore | None = None,
        factory: RuleFactory | None = None,
    ) -> None:
        """Initialize executor with optional injected store and factory.

        Args:
            store: Optional store to use instead of creating from config.
            factory: Optional factory carrying extra registered rule types.
        """
        self._injected_store = store
        self._factory = factory or RuleFactory()

    async def execute(self, input_data: RunnerInput) -> RunnerOutput:
        """Execute the review and always return a RunnerOutput.

        A policy decision (allow, deny, patch) is a success.  A lookup
        failure still carries the AdmissionReview but is reported with
        ``success=False`` so the transport can answer with a server error.
        """
        try:
            return await self._execute_internal(input_data)
        except RuleFactoryError as e:
            return RunnerOutput(success=False, error=str(e), error_type="RuleFactoryError")
        except ExecutionError as e:
            return RunnerOutput(success=False, error=str(e), error_type="ExecutionError")
        except Exception as e:
            logger.exception("Unexpected failure while executing review")
            return RunnerOutput(success=False, error=str(e), error_type=type(e).__name__)

    async def _execute_internal(self, input_data: RunnerInput) -> RunnerOutput:
        """Internal execution logic.

        Separated from execute() to allow exception propagation
        for testing while execute() catches all errors.
        """
        store = self._injected_store or self._create_store(input_data.store)
        owns_store = self._injected_store is None

        try:
            validation = ValidationChain(store)
            for rule in self._factory.create_validation_rules(input_data.validation_rules):
                await validation.add_rule(rule)

            mutation = MutationChain(store)
            for rule in self._factory.create_mutation_rules(input_data.mutation_rules):
                await mutation.add_rule(rule)

            coordinator = AdmissionCoordinator(validation, mutation)
            request = input_data.review.request.to_request()

            if input_data.operation == "mutate":
                response = await coordinator.mutate_review(request, timeout=input_data.timeout_seconds)
            else:
                response = await coordinator.validate_review(request, timeout=input_data.timeout_seconds)

            review = AdmissionReviewOutput.from_response(response)
            if response.reason == INTERNAL_ERROR_REASON:
                return RunnerOutput(
                    success=False,
                    review=review,
                    error=response.message or "",
                    error_type=INTERNAL_ERROR_REASON,
                )
            return RunnerOutput(success=True, review=review)
        finally:
            if owns_store:
                await store.close()

    def _create_store(self, config: StoreConfigSchema) -> PolicyStore:
        """Create the policy store from configuration."""
        store: PolicyStore
        if config.type == "sqlite":
            if not config.path:
                raise ExecutionError("SQLite store requires 'path' configuration")
            store = SQLiteStore(config.path)
        elif config.type == "configmap":
            if config.api_server:
                store = ConfigMapStore(
                    api_server=config.api_server,
                    namespace=config.namespace,
                    token_path=config.token_path or None,
                    ca_path=config.ca_path or None,
                )
            else:
                store = ConfigMapStore.from_in_cluster(namespace=config.namespace)
        else:
            store = InMemoryStore(config.data)

        if config.cache_ttl_seconds:
            store = CachedStore(
                store,
                ttl_seconds=config.cache_ttl_seconds,
                max_entries=config.cache_max_entries,
            )
        return store
