# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Entry point for the workload-admission runner.

Usage:
    python -m workload_admission.runner < input.json > output.json

The runner reads a RunnerInput document from stdin, evaluates the
admission review and writes a RunnerOutput document to stdout.  Logs go
to stderr; the level is read from WORKLOAD_ADMISSION_LOG_LEVEL.

Exit codes:
    0: A policy decision was reached (allow, deny or patch)
    1: Failure (error details in JSON output)
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from .executor import Executor
from .schema import RunnerInput, RunnerOutput

LOG_LEVEL_ENV = "WORKLOAD_ADMISSION_LOG_LEVEL"


def configure_logging() -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=os.getenv(LOG_LEVEL_ENV, "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    configure_logging()
    try:
        input_data = RunnerInput.model_validate_json(sys.stdin.read())

        executor = Executor()
        output = asyncio.run(executor.execute(input_data))

        print(output.model_dump_json(by_alias=True, exclude_none=True))

        return 0 if output.success else 1

    except Exception as e:
        # Ensure we always output valid JSON, even on unexpected errors
        error_output = RunnerOutput(
            success=False,
            error=str(e),
            error_type=type(e).__name__,
        )
        print(error_output.model_dump_json(by_alias=True, exclude_none=True))
        return 1


if __name__ == "__main__":
    sys.exit(main())
