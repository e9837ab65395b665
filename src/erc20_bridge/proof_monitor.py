"""
Registration proof monitoring.

After a registration transaction is submitted, the indexer is polled until it
reports the block the registration landed in. The membership proof for that
block is then fetched and published on the ProofBus.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from web3 import Web3

from .exceptions import IndexerUnavailable, ProofFetchFailure
from .models import IndexerRecord, MonitorState, ProofEvent

if TYPE_CHECKING:
    from .proof_bus import ProofBus
    from .utils.indexer_client import IndexerClient
    from .utils.proof_client import ReadProofClient

logger = logging.getLogger(__name__)

# Storage key proven for every registration, shared across tokens
LEAF_KEY = "0xe66f3de22eed97c730152f373193b5a0485b407d88f37d5fd6a2c59e5a696691"


class ProofSubscription:
    """Handle on one address's monitoring pipeline."""

    def __init__(self, address: str) -> None:
        self.address = address
        self.state = MonitorState.POLLING
        self.attempts = 0
        self._task: asyncio.Task[ProofEvent] | None = None

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> ProofEvent:
        """
        Wait for the pipeline to finish.

        Returns:
            The delivered proof event

        Raises:
            ProofFetchFailure: If the proof could not be fetched
            IndexerUnavailable: If a bounded poll ran out of attempts
            asyncio.CancelledError: If the subscription was cancelled
        """
        if self._task is None:
            raise RuntimeError(f"Monitoring for {self.address} has not started")
        # Cancelling the waiter must not cancel the monitor itself
        return await asyncio.shield(self._task)

    def unsubscribe(self) -> None:
        """Stop polling for this address. The submitted transaction is unaffected."""
        if self._task is not None and not self._task.done():
            logger.info(f"Stopping proof monitoring for {self.address}")
            self._task.cancel()

    def __repr__(self) -> str:
        return f"ProofSubscription(address={self.address}, state={self.state.value}, attempts={self.attempts})"


class ProofMonitor:
    """Runs poll, retry, proof fetch and publish pipelines per token address."""

    def __init__(
        self,
        indexer: "IndexerClient",
        proof_client: "ReadProofClient",
        bus: "ProofBus",
        retry_delay: float = 3.0,
        max_attempts: int | None = None
    ) -> None:
        """
        Initialize the ProofMonitor.

        Args:
            indexer: Client for the registration indexer
            proof_client: Client producing membership proofs
            bus: Channel proofs are published on
            retry_delay: Seconds between indexer polls, fixed
            max_attempts: Poll limit per address, None polls until indexed
        """
        self.indexer = indexer
        self.proof_client = proof_client
        self.bus = bus
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts

        # One in-flight pipeline per address
        self.active: dict[str, ProofSubscription] = {}

    def monitor(self, address: str) -> ProofSubscription:
        """
        Start monitoring `address`, or return the pipeline already running for it.

        Must be called from a running event loop.
        """
        key = address.lower()
        if (existing := self.active.get(key)) is not None and not existing.done:
            logger.info(f"Proof monitoring already running for {address}")
            return existing

        subscription = ProofSubscription(Web3.to_checksum_address(address))
        subscription._task = asyncio.create_task(
            self._run(subscription),
            name=f"proof-monitor-{key}"
        )
        subscription._task.add_done_callback(lambda task: self._finished(key, subscription, task))
        self.active[key] = subscription
        logger.info(f"Started proof monitoring for {subscription.address}")
        return subscription

    def _finished(self, key: str, subscription: ProofSubscription, task: asyncio.Task) -> None:
        if self.active.get(key) is subscription:
            del self.active[key]

        if task.cancelled():
            subscription.state = MonitorState.CANCELLED
            return
        if (error := task.exception()) is not None:
            logger.error(f"Proof monitoring for {subscription.address} failed: {error}")

    async def _poll(self, subscription: ProofSubscription) -> IndexerRecord:
        while True:
            subscription.attempts += 1
            try:
                record = await self.indexer.fetch_register_record(subscription.address)
            except IndexerUnavailable as e:
                if self.max_attempts is not None and subscription.attempts >= self.max_attempts:
                    raise IndexerUnavailable(
                        f"{subscription.address} not indexed after {subscription.attempts} attempts"
                    ) from e
                logger.warning(
                    f"Attempt {subscription.attempts} for {subscription.address}: {e}, "
                    f"retrying in {self.retry_delay}s"
                )
                await asyncio.sleep(self.retry_delay)
                continue

            logger.info(
                f"Registration of {subscription.address} indexed in block "
                f"{record.block_num} ({record.block_hash[:10]}...)"
            )
            return record

    async def _run(self, subscription: ProofSubscription) -> ProofEvent:
        try:
            record = await self._poll(subscription)

            subscription.state = MonitorState.PROOF_FETCHING
            try:
                result = await self.proof_client.get_membership_proof(record.block_hash, LEAF_KEY)
            except ProofFetchFailure:
                raise
            except Exception as e:
                raise ProofFetchFailure(
                    f"Proof fetch for block {record.block_hash} failed: {e}"
                ) from e

            event = ProofEvent(
                source=subscription.address,
                block_hash=record.block_hash,
                leaf_key=LEAF_KEY,
                at=result["at"],
                proof=tuple(result["proof"]),
                record=record,
            )
            subscription.state = MonitorState.DELIVERED
            self.bus.publish(event)
            return event

        except asyncio.CancelledError:
            subscription.state = MonitorState.CANCELLED
            raise
        except Exception:
            subscription.state = MonitorState.FAILED
            raise

    async def stop(self) -> None:
        """Cancel every running pipeline and wait for them to finish."""
        subscriptions = list(self.active.values())
        for subscription in subscriptions:
            subscription.unsubscribe()

        tasks = [s._task for s in subscriptions if s._task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
