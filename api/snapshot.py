# api/snapshot.py
"""
Boundary between JSON payloads and the settlement core.

Parses participants, expenses and balance maps, checks that every expense
only names known participants, and provides the editing operations the
client performs on a snapshot. Editing operations always return new lists.
"""
import math
import uuid

from settlement import ExpenseEntry, Participant


class PayloadError(ValueError):
    """The request body is not shaped the way the API expects."""


class ReferentialError(ValueError):
    """An expense names a payer or beneficiary that is not a participant."""


def new_id():
    return str(uuid.uuid4())


# --- Parsing ---

def _require_list(value, name):
    if not isinstance(value, list):
        raise PayloadError(f"'{name}' must be a list")
    return value


def _require_id(value, where):
    if not isinstance(value, str) or not value:
        raise PayloadError(f"{where}: id must be a non-empty string")
    return value


def _number(value, where):
    # bool is an int subclass, but true/false is never a sum of money
    if isinstance(value, bool):
        raise PayloadError(f"{where}: amount must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise PayloadError(f"{where}: amount must be a number") from None
    except OverflowError:
        raise PayloadError(f"{where}: amount must be finite") from None
    if math.isnan(number) or math.isinf(number):
        raise PayloadError(f"{where}: amount must be finite")
    return number


def _flag(value, where):
    if not isinstance(value, bool):
        raise PayloadError(f"{where}: must be true or false")
    return value


def parse_participants(items):
    participants = []
    seen = set()

    for index, item in enumerate(_require_list(items, "participants")):
        where = f"participants[{index}]"
        if not isinstance(item, dict):
            raise PayloadError(f"{where} must be an object")

        participant_id = _require_id(item.get("id"), where)
        if participant_id in seen:
            raise PayloadError(f"{where}: duplicate participant id '{participant_id}'")
        seen.add(participant_id)

        participants.append(Participant(
            participant_id,
            name=item.get("name") or "",
            payment_address=item.get("paymentAddress"),
            paid=_flag(item.get("paid", False), f"{where}.paid"),
        ))

    return participants


def parse_expenses(items):
    expenses = []
    seen = set()

    for index, item in enumerate(_require_list(items, "expenses")):
        where = f"expenses[{index}]"
        if not isinstance(item, dict):
            raise PayloadError(f"{where} must be an object")

        expense_id = _require_id(item.get("id"), where)
        if expense_id in seen:
            raise PayloadError(f"{where}: duplicate expense id '{expense_id}'")
        seen.add(expense_id)

        amount = _number(item.get("amount"), where)
        if amount < 0:
            raise PayloadError(f"{where}: amount must not be negative")

        paid_by = _require_id(item.get("paidBy"), f"{where}.paidBy")

        # 'assignedTo' is what older clients send
        beneficiaries = item.get("beneficiaries", item.get("assignedTo", []))
        for person in _require_list(beneficiaries, f"{where}.beneficiaries"):
            _require_id(person, f"{where}.beneficiaries")

        expenses.append(ExpenseEntry(
            expense_id,
            amount,
            paid_by,
            beneficiaries,
            description=item.get("description") or "",
        ))

    return expenses


def parse_snapshot(payload):
    if not isinstance(payload, dict):
        raise PayloadError("Request body must be a JSON object")

    participants = parse_participants(payload.get("participants", []))
    expenses = parse_expenses(payload.get("expenses", []))
    return participants, expenses


def parse_legacy_expenses(items):
    """
    Older clients post a bare list of {payer, amount, involved} where people
    are identified by name. Names become ids, in the order they first appear.
    """
    participants = {}
    expenses = []

    for index, item in enumerate(_require_list(items, "expenses")):
        where = f"expenses[{index}]"
        if not isinstance(item, dict):
            raise PayloadError(f"{where} must be an object")

        payer = _require_id(item.get("payer"), f"{where}.payer")
        involved = _require_list(item.get("involved", []), f"{where}.involved")
        amount = _number(item.get("amount"), where)
        if amount < 0:
            raise PayloadError(f"{where}: amount must not be negative")

        # Old clients never counted these; nobody owes anything for them
        if not involved or amount == 0:
            continue

        for person in [payer] + involved:
            _require_id(person, f"{where}.involved")
            participants.setdefault(person, Participant(person, name=person))

        expenses.append(ExpenseEntry(f"expense-{index}", amount, payer, involved))

    return list(participants.values()), expenses


def parse_balances(payload):
    if not isinstance(payload, dict) or not isinstance(payload.get("balances"), dict):
        raise PayloadError("Request body must contain a 'balances' object")

    balances = {}
    for person, amount in payload["balances"].items():
        balances[person] = _number(amount, f"balances['{person}']")
    return balances


# --- Validation ---

def validate_references(participants, expenses):
    known = {person.id for person in participants}

    for exp in expenses:
        if exp.paid_by not in known:
            raise ReferentialError(f"Expense '{exp.id}' is paid by unknown participant '{exp.paid_by}'")
        for person in exp.beneficiaries:
            if person not in known:
                raise ReferentialError(f"Expense '{exp.id}' is shared with unknown participant '{person}'")


# --- Snapshot editing ---

def _copy_participant(person, **changes):
    fields = {
        "name": person.name,
        "payment_address": person.payment_address,
        "paid": person.paid,
    }
    fields.update(changes)
    return Participant(person.id, **fields)


def _copy_expense(exp, beneficiaries):
    return ExpenseEntry(exp.id, exp.amount, exp.paid_by, beneficiaries, description=exp.description)


def add_participant(participants, name, payment_address=None):
    return participants + [Participant(new_id(), name=name, payment_address=payment_address)]


def set_payment_address(participants, participant_id, address):
    return [
        _copy_participant(person, payment_address=address) if person.id == participant_id else person
        for person in participants
    ]


def toggle_paid(participants, participant_id):
    return [
        _copy_participant(person, paid=not person.paid) if person.id == participant_id else person
        for person in participants
    ]


def remove_participant(participants, expenses, participant_id):
    """
    Drop a participant and take them off every expense they share.

    Expenses they paid for would be left without a payer, so those have to be
    removed first.
    """
    for exp in expenses:
        if exp.paid_by == participant_id:
            raise ReferentialError(
                f"Participant '{participant_id}' paid for expense '{exp.id}'; remove the expense first"
            )

    remaining = [person for person in participants if person.id != participant_id]
    cleaned = [
        _copy_expense(exp, [p for p in exp.beneficiaries if p != participant_id])
        if participant_id in exp.beneficiaries else exp
        for exp in expenses
    ]
    return remaining, cleaned


def add_expense(expenses, amount, paid_by, description=""):
    # New expenses start out shared with nobody
    return expenses + [ExpenseEntry(new_id(), amount, paid_by, (), description=description)]


def remove_expense(expenses, expense_id):
    return [exp for exp in expenses if exp.id != expense_id]


def toggle_beneficiary(expenses, expense_id, participant_id):
    updated = []
    for exp in expenses:
        if exp.id == expense_id:
            if participant_id in exp.beneficiaries:
                beneficiaries = [p for p in exp.beneficiaries if p != participant_id]
            else:
                beneficiaries = list(exp.beneficiaries) + [participant_id]
            exp = _copy_expense(exp, beneficiaries)
        updated.append(exp)
    return updated
