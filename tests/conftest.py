import pytest

from satplan.data_structures import ActionSchema, FluentSet, Problem


def make_action(name, pre_pos=(), pre_neg=(), add=(), delete=()):
    return ActionSchema(name,
                        precondition=FluentSet.of(pre_pos, pre_neg),
                        effect=FluentSet.of(add, delete))


@pytest.fixture
def single_action_problem():
    """One fluent F (initially false), one action A setting it, goal F."""
    return Problem(fluents=["F"],
                   actions=[make_action("A", add=[0])],
                   initial=frozenset(),
                   goal=FluentSet.of([0]),
                   name="single")


@pytest.fixture
def unreachable_problem():
    """Goal G is never set by any action."""
    return Problem(fluents=["F", "G"],
                   actions=[make_action("setF", add=[0])],
                   initial=frozenset(),
                   goal=FluentSet.of([1]),
                   name="unreachable")


@pytest.fixture
def chain_problem():
    """Token moving a -> b -> c -> d; the shortest plan has three steps."""
    fluents = ["at_a", "at_b", "at_c", "at_d"]
    actions = [
        make_action("move_a_b", pre_pos=[0], add=[1], delete=[0]),
        make_action("move_b_c", pre_pos=[1], add=[2], delete=[1]),
        make_action("move_c_d", pre_pos=[2], add=[3], delete=[2]),
        make_action("move_b_a", pre_pos=[1], add=[0], delete=[1]),
    ]
    return Problem(fluents=fluents, actions=actions,
                   initial=frozenset([0]),
                   goal=FluentSet.of([3], [0]),
                   name="chain")


@pytest.fixture
def lock_problem():
    """Door must be unlocked (negative precondition) before it is opened."""
    fluents = ["locked", "open", "has_key"]
    actions = [
        make_action("take_key", pre_neg=[2], add=[2]),
        make_action("unlock", pre_pos=[0, 2], delete=[0]),
        make_action("open_door", pre_neg=[0, 1], add=[1]),
        make_action("lock", pre_pos=[2], pre_neg=[0, 1], add=[0]),
    ]
    return Problem(fluents=fluents, actions=actions,
                   initial=frozenset([0]),
                   goal=FluentSet.of([1]),
                   name="lock")
