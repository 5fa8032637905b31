# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Runner submodule for evaluating admission reviews from the command line.

This module provides a thin stdin/stdout boundary around the
AdmissionCoordinator, for use behind any HTTPS front end.

Usage:
    python -m workload_admission.runner < input.json > output.json

Exports:
    Executor: Builds store, chains and coordinator, then runs one review
    RuleFactory: Creates rule instances from configuration
    RunnerInput: Input schema
    RunnerOutput: Output schema
"""

from .executor import ExecutionError, Executor
from .factory import RuleFactory, RuleFactoryError
from .schema import (
    AdmissionRequestSchema,
    AdmissionReviewInput,
    AdmissionReviewOutput,
    RuleConfigSchema,
    RunnerInput,
    RunnerOutput,
    StoreConfigSchema,
)

__all__ = [
    "AdmissionRequestSchema",
    "AdmissionReviewInput",
    "AdmissionReviewOutput",
    "ExecutionError",
    "Executor",
    "RuleConfigSchema",
    "RuleFactory",
    "RuleFactoryError",
    "RunnerInput",
    "RunnerOutput",
    "StoreConfigSchema",
]
