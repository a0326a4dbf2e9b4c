"""Economy ledger rules — coins and seed unlocks.

Each function validates first and only touches the state once every check
has passed, so a rejected call leaves the state exactly as it was.
"""

from datetime import datetime

from gardenplots import SeedDefinition, SeedPurchase, VisitorGardenState

from services.garden.results import PurchaseResult, Rejection


def can_afford(state: VisitorGardenState, cost: int) -> bool:
    return state.coins_available >= cost


def is_seed_unlocked(state: VisitorGardenState, seed: SeedDefinition) -> bool:
    """Free seeds are always unlocked; paid seeds once purchased."""
    return seed.is_free or seed.id in state.seeds_purchased


def purchase(state: VisitorGardenState, seed: SeedDefinition, now: datetime) -> PurchaseResult:
    """Unlock a paid seed, debiting its cost.

    Rejects free seeds (they need no purchase), seeds already owned, and
    purchases the visitor cannot afford.
    """
    result = PurchaseResult(cost=seed.cost, coins_available=state.coins_available)

    if seed.is_free:
        result.reject(
            Rejection.SEED_IS_FREE,
            f"{seed.name} seeds are free and do not need to be purchased.",
        )
        return result

    if seed.id in state.seeds_purchased:
        result.reject(Rejection.ALREADY_OWNED, f"You already own the {seed.name} seed.")
        return result

    if not can_afford(state, seed.cost):
        result.reject(
            Rejection.INSUFFICIENT_COINS,
            f"Not enough coins. You have {state.coins_available}, "
            f"but {seed.name} costs {seed.cost}.",
        )
        return result

    state.coins_available -= seed.cost
    state.seeds_purchased[seed.id] = SeedPurchase(id=seed.id, purchased_at=now)
    result.coins_available = state.coins_available
    return result


def harvest_reward(state: VisitorGardenState, seed: SeedDefinition) -> int:
    """Credit a harvest reward to both balances. Returns the amount credited.

    The caller must already have checked that the harvest is allowed.
    """
    state.coins_available += seed.reward
    state.total_coins_earned += seed.reward
    return seed.reward
