"""Transaction submission pipeline — simulate, relay, direct fallback, confirm.

State machine:
  BUILT → SIMULATED → SUBMITTED_VIA_RELAY | SUBMITTED_VIA_DIRECT → CONFIRMED | FAILED

  1. Build attempt 0 with a fresh blockhash and simulate it. A simulation
     error is final: nothing is broadcast.
  2. Relay (Helius Sender): one shot, skipPreflight, no server retries.
     Any failure (transport, timeout, RPC error, missing result, failed
     confirmation) falls through to direct broadcast.
  3. Direct broadcast: up to ``max_direct_attempts``. Attempt 1 reuses the
     simulated transaction; each later attempt compiles a NEW signed
     transaction against a fresh blockhash. An on-chain execution error
     fails the attempt.

Transactions are never mutated: the caller supplies a factory that turns a
blockhash into a signed VersionedTransaction.
"""

from __future__ import annotations

import base64
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger
from solders.transaction import VersionedTransaction  # type: ignore[import-untyped]

from src.chain.errors import ErrorKind, RelayError, RpcError
from src.chain.relay import HeliusSenderClient
from src.chain.rpc import Confirmation, LatestBlockhash, SolanaRpcClient

DEFAULT_DIRECT_ATTEMPTS = 3

TransactionFactory = Callable[[LatestBlockhash], VersionedTransaction]
SimulatedHook = Callable[["SignedAttempt"], Awaitable[None]]


class SubmissionState(str, Enum):
    BUILT = "built"
    SIMULATED = "simulated"
    SUBMITTED_VIA_RELAY = "submitted_via_relay"
    SUBMITTED_VIA_DIRECT = "submitted_via_direct"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class SubmissionPath(str, Enum):
    RELAY = "relay"
    DIRECT = "direct"


@dataclass(frozen=True)
class SignedAttempt:
    """One signed transaction bound to one blockhash."""

    transaction: VersionedTransaction
    blockhash: LatestBlockhash

    @property
    def signature(self) -> str:
        return str(self.transaction.signatures[0])

    @property
    def wire(self) -> str:
        return base64.b64encode(bytes(self.transaction)).decode("ascii")


@dataclass
class SubmissionResult:
    """Outcome of a submission run."""

    success: bool
    signature: str | None = None
    path: SubmissionPath | None = None
    slot: int | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None
    onchain_error: Any = None
    logs: list[str] = field(default_factory=list)
    states: list[SubmissionState] = field(default_factory=list)
    direct_attempts: int = 0

    @property
    def state(self) -> SubmissionState | None:
        return self.states[-1] if self.states else None


class TransactionSubmitter:
    """Runs the submit state machine for signed token-creation transactions."""

    def __init__(
        self,
        *,
        rpc: SolanaRpcClient,
        relay: HeliusSenderClient | None = None,
        max_direct_attempts: int = DEFAULT_DIRECT_ATTEMPTS,
    ) -> None:
        if max_direct_attempts < 1:
            raise ValueError("max_direct_attempts must be >= 1")
        self._rpc = rpc
        self._relay = relay
        self._max_direct = max_direct_attempts

    async def submit(
        self,
        build: TransactionFactory,
        *,
        on_simulated: SimulatedHook | None = None,
    ) -> SubmissionResult:
        result = SubmissionResult(success=False)

        try:
            attempt = await self._new_attempt(build)
        except RpcError as e:
            return self._fail(result, ErrorKind.SIMULATION_FAILED, f"Could not fetch blockhash: {e}")
        result.states.append(SubmissionState.BUILT)

        # ── Simulate ──────────────────────────────────────────────────
        try:
            sim = await self._rpc.simulate_transaction(attempt.wire)
        except RpcError as e:
            return self._fail(result, ErrorKind.SIMULATION_FAILED, f"Simulation call failed: {e}")

        result.logs = sim.logs
        if sim.err is not None:
            logger.error(f"[SUBMIT] Simulation failed: {sim.err}")
            for line in sim.logs:
                logger.error(f"[SUBMIT]   {line}")
            return self._fail(
                result, ErrorKind.SIMULATION_FAILED, f"Transaction simulation failed: {sim.err}"
            )
        result.states.append(SubmissionState.SIMULATED)
        logger.info(
            f"[SUBMIT] Simulation ok ({sim.units_consumed} CU), signature={attempt.signature}"
        )

        if on_simulated is not None:
            await on_simulated(attempt)

        # ── Relay ─────────────────────────────────────────────────────
        if self._relay is not None:
            confirmation = await self._try_relay(self._relay, attempt, result)
            if confirmation is not None:
                return self._succeed(result, confirmation, SubmissionPath.RELAY)

        # ── Direct broadcast ─────────────────────────────────────────
        for n in range(1, self._max_direct + 1):
            result.direct_attempts = n
            if n > 1:
                try:
                    attempt = await self._new_attempt(build)
                except RpcError as e:
                    self._record_error(result, ErrorKind.BROADCAST_FAILED, f"Blockhash refresh failed: {e}")
                    logger.warning(f"[SUBMIT] Direct attempt {n}/{self._max_direct}: {result.error}")
                    continue

            logger.info(f"[SUBMIT] Direct attempt {n}/{self._max_direct} sig={attempt.signature}")
            try:
                signature = await self._rpc.send_transaction(attempt.wire, skip_preflight=False)
                result.signature = signature
                result.states.append(SubmissionState.SUBMITTED_VIA_DIRECT)
                confirmation = await self._rpc.confirm_transaction(
                    signature,
                    last_valid_block_height=attempt.blockhash.last_valid_block_height,
                )
            except RpcError as e:
                self._record_error(result, ErrorKind.BROADCAST_FAILED, str(e))
                logger.warning(f"[SUBMIT] Direct attempt {n}/{self._max_direct} failed: {e}")
                continue

            if not confirmation.succeeded:
                result.onchain_error = confirmation.err
                self._record_error(
                    result, ErrorKind.ONCHAIN_ERROR, f"Transaction failed on-chain: {confirmation.err}"
                )
                logger.warning(
                    f"[SUBMIT] Direct attempt {n}/{self._max_direct} landed with error "
                    f"{confirmation.err} (slot {confirmation.slot})"
                )
                continue

            return self._succeed(result, confirmation, SubmissionPath.DIRECT)

        result.states.append(SubmissionState.FAILED)
        logger.error(f"[SUBMIT] All submission paths failed: {result.error}")
        return result

    async def _new_attempt(self, build: TransactionFactory) -> SignedAttempt:
        blockhash = await self._rpc.get_latest_blockhash()
        return SignedAttempt(transaction=build(blockhash), blockhash=blockhash)

    async def _try_relay(
        self, relay: HeliusSenderClient, attempt: SignedAttempt, result: SubmissionResult
    ) -> Confirmation | None:
        try:
            signature = await relay.send_transaction(attempt.wire)
            result.signature = signature
            result.states.append(SubmissionState.SUBMITTED_VIA_RELAY)
            logger.info(f"[SUBMIT] Relay accepted {signature}")
            confirmation = await self._rpc.confirm_transaction(
                signature,
                last_valid_block_height=attempt.blockhash.last_valid_block_height,
            )
        except (RelayError, RpcError) as e:
            self._record_error(result, ErrorKind.RELAY_FAILED, str(e))
            logger.warning(f"[SUBMIT] Relay path failed, falling back to direct RPC: {e}")
            return None

        if not confirmation.succeeded:
            result.onchain_error = confirmation.err
            self._record_error(
                result, ErrorKind.ONCHAIN_ERROR, f"Transaction failed on-chain: {confirmation.err}"
            )
            logger.warning(
                f"[SUBMIT] Relay transaction landed with error {confirmation.err}, "
                f"falling back to direct RPC"
            )
            return None

        return confirmation

    @staticmethod
    def _record_error(result: SubmissionResult, kind: ErrorKind, message: str) -> None:
        result.error_kind = kind
        result.error = message

    @staticmethod
    def _fail(result: SubmissionResult, kind: ErrorKind, message: str) -> SubmissionResult:
        result.error_kind = kind
        result.error = message
        result.states.append(SubmissionState.FAILED)
        return result

    @staticmethod
    def _succeed(
        result: SubmissionResult, confirmation: Confirmation, path: SubmissionPath
    ) -> SubmissionResult:
        result.success = True
        result.signature = confirmation.signature
        result.slot = confirmation.slot
        result.path = path
        result.error_kind = None
        result.error = None
        result.onchain_error = None
        result.states.append(SubmissionState.CONFIRMED)
        logger.info(f"[SUBMIT] Confirmed via {path.value}: {confirmation.signature} slot={confirmation.slot}")
        return result
