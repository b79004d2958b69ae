import random

from settlement import (
    EPSILON,
    ExpenseEntry,
    Participant,
    Transfer,
    compute_balances,
    compute_share,
    compute_transfers,
)


def random_group(rng):
    # Whole-unit amounts over at most six people keep every real balance
    # at least 1/60 away from zero, so only float noise falls under EPSILON
    people = [Participant(f"P{n}") for n in range(rng.randint(2, 6))]
    ids = [p.id for p in people]

    expenses = []
    for n in range(rng.randint(1, 15)):
        beneficiaries = rng.sample(ids, rng.randint(1, len(ids)))
        expenses.append(ExpenseEntry(f"e{n}", rng.randint(1, 500), rng.choice(ids), beneficiaries))
    return people, expenses


def replay(balances, transfers):
    after = dict(balances)
    for t in transfers:
        after[t.debtor] += t.amount
        after[t.creditor] -= t.amount
    return after


def test_single_payer(trio, dinner):
    balances = compute_balances(trio, dinner)

    assert balances == {"A": 20.0, "B": -10.0, "C": -10.0}
    assert compute_transfers(balances) == [
        Transfer("B", "A", 10.0),
        Transfer("C", "A", 10.0),
    ]


def test_share_is_owed_minus_paid(trio, dinner):
    assert compute_share("A", dinner) == -20.0
    assert compute_share("B", dinner) == 10.0
    assert compute_share("nobody", dinner) == 0.0


def test_expense_without_beneficiaries_credits_payer(trio):
    expenses = [ExpenseEntry("e1", 50, "A", [])]

    assert compute_balances(trio, expenses) == {"A": 50.0, "B": 0.0, "C": 0.0}
    assert compute_share("A", expenses) == -50.0


def test_payer_outside_beneficiaries(trio):
    expenses = [ExpenseEntry("e1", 20, "A", ["B", "C"])]

    assert compute_balances(trio, expenses) == {"A": 20.0, "B": -10.0, "C": -10.0}


def test_duplicate_beneficiaries_count_once(trio):
    expenses = [ExpenseEntry("e1", 30, "A", ["A", "B", "B"])]

    assert expenses[0].beneficiaries == ("A", "B")
    assert compute_balances(trio, expenses) == {"A": 15.0, "B": -15.0, "C": 0.0}


def test_balances_follow_participant_order(dinner):
    people = [Participant("C"), Participant("A"), Participant("B")]

    assert list(compute_balances(people, dinner)) == ["C", "A", "B"]


def test_no_op_on_balanced_input():
    assert compute_transfers({}) == []
    assert compute_transfers({"A": 0, "B": 0}) == []
    assert compute_transfers({"A": 0.0, "B": -0.0}) == []


def test_rounding_noise_is_not_a_transfer():
    assert compute_transfers({"A": -0.005, "B": 0.005}) == []


def test_largest_debtor_pays_first():
    balances = {"A": 30, "B": -10, "C": -20, "D": 0}

    assert compute_transfers(balances) == [
        Transfer("C", "A", 20),
        Transfer("B", "A", 10),
    ]


def test_equal_balances_keep_map_order():
    assert compute_transfers({"B": -5, "A": -5, "C": 10}) == [
        Transfer("B", "C", 5),
        Transfer("A", "C", 5),
    ]
    assert compute_transfers({"X": -6, "C2": 3, "C1": 3}) == [
        Transfer("X", "C2", 3),
        Transfer("X", "C1", 3),
    ]


def test_debtor_split_across_creditors():
    balances = {"A": 10, "B": 25, "C": -20, "D": -15}

    assert compute_transfers(balances) == [
        Transfer("C", "B", 20),
        Transfer("D", "B", 5),
        Transfer("D", "A", 10),
    ]


def test_transfers_leave_input_untouched():
    balances = {"A": 10, "B": 25, "C": -20, "D": -15}
    before = dict(balances)

    compute_transfers(balances)

    assert balances == before


def test_transfer_to_dict():
    assert Transfer("B", "A", 10.0).to_dict() == {"from": "B", "to": "A", "amount": 10.0}


def test_zero_sum_completeness_and_bound():
    rng = random.Random(1234)

    for _ in range(200):
        people, expenses = random_group(rng)
        balances = compute_balances(people, expenses)

        assert abs(sum(balances.values())) < EPSILON

        transfers = compute_transfers(balances)
        assert all(t.amount > EPSILON for t in transfers)
        assert all(abs(value) < EPSILON for value in replay(balances, transfers).values())

        debtors = sum(1 for value in balances.values() if value < 0)
        creditors = sum(1 for value in balances.values() if value > 0)
        assert len(transfers) <= max(0, debtors + creditors - 1)


def test_three_way_split_rounding():
    people = [Participant("A"), Participant("B"), Participant("C")]
    expenses = [ExpenseEntry("e1", 10, "A", ["A", "B", "C"])]

    balances = compute_balances(people, expenses)
    transfers = compute_transfers(balances)

    assert [(t.debtor, t.creditor) for t in transfers] == [("B", "A"), ("C", "A")]
    assert all(abs(value) < EPSILON for value in replay(balances, transfers).values())
