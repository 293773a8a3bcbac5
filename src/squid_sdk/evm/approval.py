"""Token spending approval.

Allowance is read fresh on every call; nothing is cached.
"""

import logging
from typing import Any, Mapping, Optional

from squid_sdk.constants import UINT256_MAX
from squid_sdk.errors import ValidationError
from squid_sdk.evm.erc20 import Erc20Token
from squid_sdk.models import ChainId
from squid_sdk.signers import EvmSigner, SubmittedTransaction

logger = logging.getLogger(__name__)


def approval_amount(amount: int, infinite_approval: bool) -> int:
    return UINT256_MAX if infinite_approval else int(amount)


async def ensure_approved(
    address: str,
    spender: str,
    amount: int,
    token: Optional[Erc20Token],
    signer: EvmSigner,
    infinite_approval: bool = True,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Optional[SubmittedTransaction]:
    """Make sure ``spender`` may move ``amount`` of ``token`` for ``address``.

    Submits an approval when the allowance is short and waits for it to be
    mined before returning, so the follow-up transfer sees it.

    Returns:
        The approval transaction, or None when nothing had to be sent
    """
    if token is None:
        return None

    allowance = await token.allowance(address, spender)
    if int(amount) <= allowance:
        logger.debug(f"Allowance {allowance} of {token.address} covers {amount}")
        return None

    amount_to_approve = approval_amount(amount, infinite_approval)
    approve_tx = await token.approve(signer, spender, amount_to_approve, overrides)
    await approve_tx.wait()
    logger.info(f"Approval {approve_tx.tx_hash} confirmed for spender {spender}")
    return approve_tx


async def check_approved(
    address: str,
    spender: str,
    amount: int,
    token: Optional[Erc20Token],
    chain_id: ChainId,
) -> bool:
    """Read-only allowance check; never submits a transaction.

    Raises:
        ValidationError: if the allowance is below ``amount``
    """
    if token is None:
        return True

    allowance = await token.allowance(address, spender)
    if int(amount) > allowance:
        raise ValidationError(f"Insufficient allowance for contract: {spender} on chain {chain_id}")
    return True
