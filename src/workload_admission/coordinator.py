"""AdmissionCoordinator — the two public entry points of the engine."""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING

from workload_admission.chains import MutationChain, ValidationChain
from workload_admission.exceptions import DecodeError, RuleError, StoreLookupError
from workload_admission.review import AdmissionResponse, build_patch, build_verdict
from workload_admission.workload import decode_pod, extract

if TYPE_CHECKING:
    from workload_admission.request import AdmissionRequest

logger = logging.getLogger(__name__)

INTERNAL_ERROR_REASON = "InternalError"


class AdmissionCoordinator:
    """Decodes the admitted object, runs a chain and builds the response.

    Both entry points are stateless with respect to the coordinator: the
    chains are built once at startup and only read afterwards, so one
    coordinator can serve any number of concurrent requests.

    Outcomes:
        * malformed object                 -> deny, 400
        * rule could not evaluate          -> deny, 400
        * policy violation                 -> deny, 403, rule reason verbatim
        * all rules pass                   -> allow, 202, ``"valid"``
        * store unavailable / deadline hit -> deny, 500, ``InternalError``

    Parameters:
        validation_chain: Rules run by :meth:`validate_review`.
        mutation_chain:   Rules run by :meth:`mutate_review`.
    """

    def __init__(
        self,
        validation_chain: ValidationChain | None = None,
        mutation_chain: MutationChain | None = None,
    ) -> None:
        self._validation = validation_chain or ValidationChain()
        self._mutation = mutation_chain or MutationChain()

    @property
    def validation_chain(self) -> ValidationChain:
        return self._validation

    @property
    def mutation_chain(self) -> MutationChain:
        return self._mutation

    async def mutate_review(
        self,
        request: AdmissionRequest,
        *,
        timeout: float | None = None,
    ) -> AdmissionResponse:
        """Run the mutation chain and return a patch (possibly empty)."""
        try:
            pod = decode_pod(request.object)
        except DecodeError as exc:
            return self._bad_request(request, f"could not parse pod in admission review request: {exc}")

        try:
            async with asyncio.timeout(timeout):
                operations = await self._mutation.mutate_all(pod)
        except StoreLookupError as exc:
            return self._server_failure(request, exc)
        except TimeoutError:
            return self._deadline_exceeded(request, timeout)
        except RuleError as exc:
            return self._bad_request(request, f"could not mutate pod: {exc}")
        except Exception as exc:
            return self._rule_crashed(request, f"could not mutate pod: {exc!r}")

        logger.info(
            "Mutated uid=%s kind=%s with %d operation(s)",
            request.uid,
            request.kind,
            len(operations),
        )
        return build_patch(request.uid, operations)

    async def validate_review(
        self,
        request: AdmissionRequest,
        *,
        timeout: float | None = None,
    ) -> AdmissionResponse:
        """Run the validation chain against the object's pod template."""
        try:
            template, namespace = extract(request.kind, request.object)
        except DecodeError as exc:
            return self._bad_request(request, f"could not parse pod in admission review request: {exc}")

        namespace = namespace or request.namespace

        try:
            async with asyncio.timeout(timeout):
                outcome = await self._validation.validate_all(template, namespace, request.username)
        except StoreLookupError as exc:
            return self._server_failure(request, exc)
        except TimeoutError:
            return self._deadline_exceeded(request, timeout)
        except RuleError as exc:
            return self._bad_request(request, f"could not validate pod: {exc}")
        except Exception as exc:
            return self._rule_crashed(request, f"could not validate pod: {exc!r}")

        if not outcome.valid:
            logger.warning(
                "Denied uid=%s kind=%s namespace=%s user=%s rule=%s",
                request.uid,
                request.kind,
                namespace,
                request.username,
                outcome.rule_name,
            )
            return build_verdict(request.uid, False, HTTPStatus.FORBIDDEN, outcome.reason)

        logger.info("Allowed uid=%s kind=%s namespace=%s", request.uid, request.kind, namespace)
        return build_verdict(request.uid, True, HTTPStatus.ACCEPTED, outcome.reason)

    # ── terminal responses ───────────────────────────────────

    def _bad_request(self, request: AdmissionRequest, message: str) -> AdmissionResponse:
        logger.warning("Rejected uid=%s kind=%s: %s", request.uid, request.kind, message)
        return build_verdict(request.uid, False, HTTPStatus.BAD_REQUEST, message)

    def _rule_crashed(self, request: AdmissionRequest, message: str) -> AdmissionResponse:
        logger.exception("Rule raised while reviewing uid=%s kind=%s", request.uid, request.kind)
        return build_verdict(request.uid, False, HTTPStatus.BAD_REQUEST, message)

    def _server_failure(self, request: AdmissionRequest, exc: StoreLookupError) -> AdmissionResponse:
        logger.error(
            "Policy store failure for uid=%s kind=%s during %s: %s",
            request.uid,
            request.kind,
            exc.operation,
            exc.detail,
        )
        return build_verdict(
            request.uid,
            False,
            HTTPStatus.INTERNAL_SERVER_ERROR,
            str(exc),
            reason=INTERNAL_ERROR_REASON,
        )

    def _deadline_exceeded(self, request: AdmissionRequest, timeout: float | None) -> AdmissionResponse:
        logger.error("Evaluation of uid=%s exceeded its %ss deadline", request.uid, timeout)
        return build_verdict(
            request.uid,
            False,
            HTTPStatus.INTERNAL_SERVER_ERROR,
            f"policy evaluation exceeded its deadline of {timeout}s",
            reason=INTERNAL_ERROR_REASON,
        )
