"""
Round resolution for the War card game.

``resolve_round`` draws one card from each pile, compares ranks and awards
the pot, escalating into a (possibly chained) war when the ranks tie. It works
directly on the two piles it is given and keeps no other state, so the same
pile contents always produce the same result.
"""

import logging
from typing import List, Optional, Tuple

from cardwar.common.card import Card
from cardwar.common.deck import CardQueue
from cardwar.war.constants import MAX_WAR_DEPTH, WAR_CARD_COUNT, RoundOutcome, Side
from cardwar.war.state import RoundResult, WarEscalation, WarRound

logger = logging.getLogger(__name__)


class WarEscalationError(RuntimeError):
    """Raised when a war recurses deeper than the cards could ever allow."""

    pass


def resolve_round(player_deck: CardQueue, opponent_deck: CardQueue) -> RoundResult:
    """
    Play one round of War between two piles.

    Args:
        player_deck: The player's pile, mutated in place
        opponent_deck: The opponent's pile, mutated in place

    Returns:
        The result of the round. If either pile is already empty nothing is
        drawn and a game-ended result is returned.
    """
    if player_deck.is_empty() or opponent_deck.is_empty():
        winner = _side_with_more_cards(player_deck, opponent_deck)
        return RoundResult(
            player_card=None,
            opponent_card=None,
            outcome=RoundOutcome.for_winner(winner) if winner else RoundOutcome.WAR,
            winner=winner,
            cards_won=0,
            is_game_ended=True,
        )

    player_card = player_deck.dequeue()
    opponent_card = opponent_deck.dequeue()

    escalation = WarEscalation()
    escalation.commit([player_card], [opponent_card])

    if player_card.value != opponent_card.value:
        winner = _higher(player_card, opponent_card)
        _award(winner, escalation.pot, player_deck, opponent_deck)
        return RoundResult(
            player_card=player_card,
            opponent_card=opponent_card,
            outcome=RoundOutcome.for_winner(winner),
            winner=winner,
            cards_won=len(escalation.pot),
            is_game_ended=_is_over(player_deck, opponent_deck),
        )

    logger.debug("War on %s vs %s", player_card, opponent_card)
    winner, exhausted = _escalate(escalation, player_deck, opponent_deck, depth=1)

    return RoundResult(
        player_card=player_card,
        opponent_card=opponent_card,
        outcome=RoundOutcome.WAR,
        winner=winner,
        cards_won=len(escalation.pot) if winner else 0,
        is_game_ended=exhausted or _is_over(player_deck, opponent_deck),
        war=escalation.summary(exhausted),
    )


def _escalate(
    escalation: WarEscalation,
    player_deck: CardQueue,
    opponent_deck: CardQueue,
    depth: int,
) -> Tuple[Optional[Side], bool]:
    """
    Play one war level on top of the current pot, recursing on another tie.

    Returns:
        (winner, exhausted) where ``exhausted`` means the piles ran out
        before a face-up comparison could settle the war.
    """
    if depth > MAX_WAR_DEPTH:
        raise WarEscalationError(
            f"War reached depth {depth} with {len(escalation.pot)} cards in the pot"
        )

    war_card_count = min(WAR_CARD_COUNT, player_deck.size, opponent_deck.size)

    if war_card_count == 0:
        winner = _side_with_more_cards(player_deck, opponent_deck)
        if winner is None:
            # Both piles are empty: a drawn game, everyone takes their cards back
            player_deck.enqueue_all(escalation.player_committed)
            opponent_deck.enqueue_all(escalation.opponent_committed)
            logger.info("War ended in a draw with %d cards at stake", len(escalation.pot))
        else:
            _award(winner, escalation.pot, player_deck, opponent_deck)
        return winner, True

    player_face_down = [player_deck.dequeue() for _ in range(war_card_count - 1)]
    opponent_face_down = [opponent_deck.dequeue() for _ in range(war_card_count - 1)]
    player_up = player_deck.dequeue()
    opponent_up = opponent_deck.dequeue()

    escalation.commit(player_face_down + [player_up], opponent_face_down + [opponent_up])
    war_round = WarRound(
        level=depth,
        player_face_down=tuple(player_face_down),
        opponent_face_down=tuple(opponent_face_down),
        player_card=player_up,
        opponent_card=opponent_up,
    )
    escalation.rounds.append(war_round)

    if war_round.is_tied:
        logger.debug("Chained war at level %d on %s vs %s", depth, player_up, opponent_up)
        return _escalate(escalation, player_deck, opponent_deck, depth + 1)

    winner = _higher(player_up, opponent_up)
    _award(winner, escalation.pot, player_deck, opponent_deck)
    return winner, False


def _higher(player_card: Card, opponent_card: Card) -> Side:
    return Side.PLAYER if player_card.value > opponent_card.value else Side.OPPONENT


def _side_with_more_cards(
    player_deck: CardQueue, opponent_deck: CardQueue
) -> Optional[Side]:
    if player_deck.size > opponent_deck.size:
        return Side.PLAYER
    if opponent_deck.size > player_deck.size:
        return Side.OPPONENT
    return None


def _award(
    winner: Side, pot: List[Card], player_deck: CardQueue, opponent_deck: CardQueue
) -> None:
    target = player_deck if winner is Side.PLAYER else opponent_deck
    target.enqueue_all(pot)


def _is_over(player_deck: CardQueue, opponent_deck: CardQueue) -> bool:
    return player_deck.is_empty() or opponent_deck.is_empty()
