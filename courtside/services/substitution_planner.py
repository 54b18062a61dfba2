"""Automatic substitution planning based on accumulated court time."""

from typing import Mapping, Sequence

from ..models import EMPTY_SWAP, PendingSwap, Player


def plan_substitution(
    on_court: Sequence[Player],
    bench: Sequence[Player],
    court_seconds: Mapping[str, int],
) -> PendingSwap:
    """
    Pick the freshest bench player to enter and the most played starter to leave.

    Ties keep list order (``min``/``max`` return the first extreme), so the
    same ledger always produces the same proposal.

    Args:
        on_court: Current starters in slot order
        bench: Current bench in bench order
        court_seconds: Player id -> accumulated court seconds

    Returns:
        PendingSwap with both sides set, or an empty swap when either list is empty
    """
    if not on_court or not bench:
        return EMPTY_SWAP

    def seconds(player: Player) -> int:
        return court_seconds.get(player.id, 0)

    incoming = min(bench, key=seconds)
    outgoing = max(on_court, key=seconds)
    return PendingSwap(incoming=incoming, outgoing=outgoing)
